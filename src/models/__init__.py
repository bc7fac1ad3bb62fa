from .models import (
    Base,
    BlogPost,
    EmailSubscription,
    generate_object_id
)

# Import database module
from .database import (
    Database,
    DatabaseError,
    db
)

# Import blog persistence functions
from .blogs import (
    create_blog,
    list_blogs,
    get_blog,
    delete_blog
)

# Import subscription persistence functions
from .subscriptions import (
    subscribe,
    list_subscriptions,
    unsubscribe
)
