"""Tests for the /api/email endpoints."""

import unittest

from blogdesk.server import create_app
from common.config.blog_config import BlogConfig
from models.database import db


class EmailApiTests(unittest.TestCase):
    """Test cases for subscribing, listing and unsubscribing over HTTP."""

    def setUp(self):
        """Set up test application with in-memory database."""
        self.app = create_app(testing=True, blog_config=BlogConfig(storage_backend='inline'))
        self.app.config.update({'TESTING': True})
        self.client = self.app.test_client()

    def tearDown(self):
        """Clean up after tests."""
        db.cleanup()

    def test_subscribe_with_json(self):
        response = self.client.post('/api/email', json={'email': 'reader@example.com'})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json(), {'success': True, 'msg': 'Email Subscribed'})

        emails = self.client.get('/api/email').get_json()['emails']
        self.assertEqual([e['email'] for e in emails], ['reader@example.com'])

    def test_subscribe_with_form(self):
        response = self.client.post('/api/email', data={'email': 'form@example.com'})
        self.assertEqual(response.status_code, 201)

    def test_invalid_email(self):
        response = self.client.post('/api/email', json={'email': 'not-an-email'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {'success': False, 'msg': 'Invalid email format'})

    def test_non_text_email(self):
        for value in (123, ["reader@example.com"], {"address": "reader@example.com"}, True):
            response = self.client.post('/api/email', json={'email': value})

            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.get_json(), {'success': False, 'msg': 'Email must be text'})
        self.assertEqual(self.client.get('/api/email').get_json()['emails'], [])

    def test_missing_email(self):
        for kwargs in ({'json': {}}, {'json': ['a@b.com']}, {'data': {}}):
            response = self.client.post('/api/email', **kwargs)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.get_json()['msg'], 'Email is required')

    def test_duplicate_email(self):
        self.client.post('/api/email', json={'email': 'a@b.com'})
        response = self.client.post('/api/email', json={'email': 'a@b.com'})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json(), {'success': False, 'msg': 'Email already subscribed'})
        self.assertEqual(len(self.client.get('/api/email').get_json()['emails']), 1)

    def test_list_newest_first(self):
        self.client.post('/api/email', json={'email': 'first@example.com'})
        self.client.post('/api/email', json={'email': 'second@example.com'})

        data = self.client.get('/api/email').get_json()
        self.assertTrue(data['success'])
        self.assertEqual([e['email'] for e in data['emails']], ['second@example.com', 'first@example.com'])
        self.assertEqual(set(data['emails'][0]), {'id', 'email', 'date'})

    def test_unsubscribe(self):
        self.client.post('/api/email', json={'email': 'leaving@example.com'})
        subscription_id = self.client.get('/api/email').get_json()['emails'][0]['id']

        response = self.client.delete(f'/api/email?id={subscription_id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'success': True, 'msg': 'Email Deleted'})
        self.assertEqual(self.client.get('/api/email').get_json()['emails'], [])

        response = self.client.delete(f'/api/email?id={subscription_id}')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['msg'], 'Email not found')

    def test_unsubscribe_bad_ids(self):
        response = self.client.delete('/api/email')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['msg'], 'Subscription ID is required')

        response = self.client.delete('/api/email?id=abc')
        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main()
