"""Tests for the publishing client."""

import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, Mock

import requests
from PIL import Image

from blogdesk.client import BlogClient, ClientError


def mock_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


class TestBlogClient(unittest.TestCase):
    """Test cases for the BlogClient class."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.session = MagicMock(spec=requests.Session)
        self.session.headers = {}
        self.client = BlogClient('http://blog.test/', timeout=5, session=self.session)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_image(self, name='cover.png', size=(2400, 1600), fmt='PNG'):
        path = os.path.join(self.temp_dir, name)
        Image.new('RGB', size, (90, 90, 200)).save(path, fmt)
        return path

    def test_publish_normalizes_and_posts(self):
        blog = {'id': 'a' * 24, 'title': 'My First Post', 'category': 'General'}
        self.session.request.return_value = mock_response(200, {'success': True, 'msg': 'Blog Added', 'blog': blog})

        result = self.client.publish(
            'My First Post',
            'This is a sufficiently long description.',
            self.write_image(),
            category='Unknown'
        )

        self.assertEqual(result, blog)
        method, url = self.session.request.call_args.args
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual((method, url), ('POST', 'http://blog.test/api/blog'))
        self.assertEqual(kwargs['timeout'], 5)
        self.assertEqual(kwargs['data']['title'], 'My First Post')

        filename, data, mimetype = kwargs['files']['image']
        self.assertEqual((filename, mimetype), ('cover.jpg', 'image/jpeg'))
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.format, 'JPEG')
            self.assertEqual(img.size, (1200, 800))

    def test_publish_without_normalizing(self):
        client = BlogClient('http://blog.test', session=self.session, normalize=False)
        self.session.request.return_value = mock_response(200, {'success': True, 'blog': {'id': 'b' * 24}})

        client.publish('My First Post', 'This is a sufficiently long description.', self.write_image(size=(10, 10)))

        filename, _, mimetype = self.session.request.call_args.kwargs['files']['image']
        self.assertEqual((filename, mimetype), ('cover.png', 'image/png'))

    def test_invalid_submission_is_not_sent(self):
        with self.assertRaises(ClientError) as ctx:
            self.client.publish('ab', 'This is a sufficiently long description.', self.write_image())
        self.assertEqual(ctx.exception.message, 'Title must be at least 3 characters long')
        self.session.request.assert_not_called()

    def test_invalid_image_is_not_sent(self):
        path = os.path.join(self.temp_dir, 'notes.txt')
        with open(path, 'w') as f:
            f.write('not an image')

        with self.assertRaises(ClientError) as ctx:
            self.client.publish('My First Post', 'This is a sufficiently long description.', path)
        self.assertIn('Invalid image type', ctx.exception.message)

        with self.assertRaises(ClientError):
            self.client.publish('My First Post', 'This is a sufficiently long description.',
                                os.path.join(self.temp_dir, 'missing.png'))
        self.session.request.assert_not_called()

    def test_corrupt_image_fails_normalization(self):
        path = os.path.join(self.temp_dir, 'broken.jpg')
        with open(path, 'wb') as f:
            f.write(b'\xff\xd8\xff garbage')

        with self.assertRaises(ClientError) as ctx:
            self.client.publish('My First Post', 'This is a sufficiently long description.', path)
        self.assertEqual(ctx.exception.message, 'Image could not be processed')
        self.session.request.assert_not_called()

    def test_server_error_message_is_surfaced(self):
        self.session.request.return_value = mock_response(409, {'success': False, 'msg': 'Email already subscribed'})

        with self.assertRaises(ClientError) as ctx:
            self.client.subscribe('a@b.com')
        self.assertEqual(ctx.exception.message, 'Email already subscribed')
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertFalse(ctx.exception.retryable)

    def test_non_json_error(self):
        self.session.request.return_value = mock_response(502)
        with self.assertRaises(ClientError) as ctx:
            self.client.list_blogs()
        self.assertEqual(ctx.exception.message, 'Server returned 502')

    def test_timeout_is_retryable(self):
        self.session.request.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(ClientError) as ctx:
            self.client.list_subscriptions()
        self.assertTrue(ctx.exception.retryable)
        self.assertIsNone(ctx.exception.status_code)

    def test_connection_error_is_retryable(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError()
        with self.assertRaises(ClientError) as ctx:
            self.client.get_blog('a' * 24)
        self.assertTrue(ctx.exception.retryable)

    def test_read_operations(self):
        self.session.request.return_value = mock_response(200, {'success': True, 'blogs': [{'id': '1'}]})
        self.assertEqual(self.client.list_blogs('Startup'), [{'id': '1'}])
        self.assertEqual(self.session.request.call_args.kwargs['params'], {'category': 'Startup'})

        self.session.request.return_value = mock_response(200, {'success': True, 'blog': {'id': 'c' * 24}})
        self.assertEqual(self.client.get_blog('c' * 24), {'id': 'c' * 24})
        self.assertEqual(self.session.request.call_args.kwargs['params'], {'id': 'c' * 24})

        self.session.request.return_value = mock_response(200, {'success': True, 'emails': []})
        self.assertEqual(self.client.list_subscriptions(), [])

    def test_delete_operations(self):
        self.session.request.return_value = mock_response(200, {'success': True, 'msg': 'Blog Deleted'})
        self.assertEqual(self.client.delete_blog('D' * 24), 'Blog Deleted')
        method, url = self.session.request.call_args.args
        self.assertEqual((method, url), ('DELETE', 'http://blog.test/api/blog'))
        self.assertEqual(self.session.request.call_args.kwargs['params'], {'id': 'd' * 24})

        self.session.request.return_value = mock_response(200, {'success': True, 'msg': 'Email Deleted'})
        self.assertEqual(self.client.unsubscribe('e' * 24), 'Email Deleted')

    def test_malformed_id_is_not_sent(self):
        with self.assertRaises(ClientError) as ctx:
            self.client.delete_blog('abc')
        self.assertEqual(ctx.exception.status_code, 400)
        self.session.request.assert_not_called()

    def test_subscribe_sends_json(self):
        self.session.request.return_value = mock_response(201, {'success': True, 'msg': 'Email Subscribed'})
        self.assertEqual(self.client.subscribe(' Reader@Example.com '), 'Email Subscribed')
        self.assertEqual(self.session.request.call_args.kwargs['json'], {'email': 'reader@example.com'})


if __name__ == '__main__':
    unittest.main()
