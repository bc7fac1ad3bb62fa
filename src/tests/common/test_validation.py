"""Tests for submission, identifier and email validation."""

import unittest

from common.errors import ValidationError
from common.validation import (
    DEFAULT_CATEGORY,
    ImageUpload,
    normalize_category,
    resolve_image_type,
    validate_author,
    validate_description,
    validate_email,
    validate_image,
    validate_object_id,
    validate_submission,
    validate_title
)


class TestSubmissionFields(unittest.TestCase):
    """Test suite for the text fields of a blog submission."""

    def test_title_is_trimmed(self):
        self.assertEqual(validate_title("  My First Post  "), "My First Post")

    def test_title_length_bounds(self):
        self.assertEqual(validate_title("abc"), "abc")
        self.assertEqual(len(validate_title("x" * 200)), 200)

        with self.assertRaises(ValidationError) as ctx:
            validate_title("ab")
        self.assertEqual(ctx.exception.message, "Title must be at least 3 characters long")
        self.assertEqual(ctx.exception.field, "title")

        with self.assertRaises(ValidationError) as ctx:
            validate_title("x" * 201)
        self.assertEqual(ctx.exception.message, "Title must be at most 200 characters long")

    def test_blank_title_is_required(self):
        for value in (None, "", "   "):
            with self.assertRaises(ValidationError) as ctx:
                validate_title(value)
            self.assertEqual(ctx.exception.message, "Title is required")

    def test_title_length_counts_trimmed_text(self):
        """Padding does not make a short title long enough."""
        with self.assertRaises(ValidationError):
            validate_title("  ab  ")

    def test_description_length_bounds(self):
        self.assertEqual(validate_description("0123456789"), "0123456789")
        self.assertEqual(len(validate_description("y" * 10000)), 10000)

        with self.assertRaises(ValidationError) as ctx:
            validate_description("too short")
        self.assertEqual(ctx.exception.field, "description")

        with self.assertRaises(ValidationError):
            validate_description("y" * 10001)

        with self.assertRaises(ValidationError) as ctx:
            validate_description("")
        self.assertEqual(ctx.exception.message, "Description is required")

    def test_category_is_coerced(self):
        self.assertEqual(normalize_category("Technology"), "Technology")
        self.assertEqual(normalize_category(" Startup "), "Startup")
        self.assertEqual(normalize_category("Unknown"), DEFAULT_CATEGORY)
        self.assertEqual(normalize_category("technology"), DEFAULT_CATEGORY)
        self.assertEqual(normalize_category(None), DEFAULT_CATEGORY)
        self.assertEqual(normalize_category(["Startup"]), DEFAULT_CATEGORY)

    def test_author_blank_means_default(self):
        self.assertIsNone(validate_author("   "))
        self.assertEqual(validate_author(" Alex "), "Alex")
        with self.assertRaises(ValidationError):
            validate_author("a" * 101)

    def test_validate_submission(self):
        submission = validate_submission({
            "title": "  My First Post ",
            "description": " This is a sufficiently long description. ",
            "category": "Unknown",
            "author": "",
            "authorImg": "/avatar.png",
        })
        self.assertEqual(submission.title, "My First Post")
        self.assertEqual(submission.description, "This is a sufficiently long description.")
        self.assertEqual(submission.category, "General")
        self.assertIsNone(submission.author)
        self.assertEqual(submission.author_img, "/avatar.png")

    def test_non_text_fields_are_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_title(42)
        self.assertEqual(ctx.exception.message, "Title must be text")
        self.assertEqual(ctx.exception.field, "title")

        with self.assertRaises(ValidationError) as ctx:
            validate_submission({
                "title": "My First Post",
                "description": "This is a sufficiently long description.",
                "authorImg": {"src": "/avatar.png"},
            })
        self.assertEqual(ctx.exception.message, "Author image must be text")

    def test_validate_submission_stops_at_first_failure(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_submission({"title": "", "description": ""})
        self.assertEqual(ctx.exception.field, "title")


class TestImageValidation(unittest.TestCase):
    """Test suite for image upload checks."""

    def test_missing_image(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_image(None)
        self.assertEqual(ctx.exception.message, "No image provided")

        with self.assertRaises(ValidationError):
            validate_image(ImageUpload("cover.jpg", "image/jpeg", b""))

    def test_disallowed_type(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_image(ImageUpload("notes.txt", "text/plain", b"hello"))
        self.assertEqual(ctx.exception.message, "Invalid image type. Allowed types: JPEG, PNG, GIF, WEBP")

    def test_size_limit(self):
        image = ImageUpload("cover.png", "image/png", b"\x89PNG" + b"\0" * 2048)
        self.assertEqual(validate_image(image, max_bytes=4096).mimetype, "image/png")
        with self.assertRaises(ValidationError) as ctx:
            validate_image(image, max_bytes=1024)
        self.assertEqual(ctx.exception.field, "image")

    def test_octet_stream_uses_filename(self):
        self.assertEqual(resolve_image_type("cover.webp", "application/octet-stream"), "image/webp")
        self.assertEqual(resolve_image_type("cover.jpg", "IMAGE/JPEG; charset=binary"), "image/jpeg")
        self.assertEqual(resolve_image_type("cover", None), "")


class TestIdentifiersAndEmail(unittest.TestCase):
    """Test suite for id and email checks."""

    def test_valid_object_id(self):
        self.assertEqual(validate_object_id("65A1F0C2B3D4E5F601234567"), "65a1f0c2b3d4e5f601234567")

    def test_malformed_object_id(self):
        for value in ("abc", "65a1f0c2b3d4e5f60123456", "65a1f0c2b3d4e5f60123456z", "../etc/passwd"):
            with self.assertRaises(ValidationError) as ctx:
                validate_object_id(value, "blog ID")
            self.assertEqual(ctx.exception.message, "Invalid blog ID format")

    def test_missing_object_id(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_object_id(None, "blog ID")
        self.assertEqual(ctx.exception.message, "Blog ID is required")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_email(self):
        self.assertEqual(validate_email("  Reader@Example.COM "), "reader@example.com")

        with self.assertRaises(ValidationError) as ctx:
            validate_email("not-an-email")
        self.assertEqual(ctx.exception.message, "Invalid email format")

        for value in ("a@b", "a b@c.com", "@example.com"):
            with self.assertRaises(ValidationError):
                validate_email(value)

        with self.assertRaises(ValidationError) as ctx:
            validate_email("")
        self.assertEqual(ctx.exception.message, "Email is required")

    def test_non_text_email_and_id(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_email(123)
        self.assertEqual(ctx.exception.message, "Email must be text")
        self.assertEqual(ctx.exception.status_code, 400)

        with self.assertRaises(ValidationError) as ctx:
            validate_object_id(["65a1f0c2b3d4e5f601234567"], "blog ID")
        self.assertEqual(ctx.exception.message, "Blog ID must be text")


if __name__ == '__main__':
    unittest.main()
