import uuid

from django.test import SimpleTestCase, RequestFactory
from django.urls import reverse
from rest_framework.test import APITestCase

from .utils import DEMO_COOKIE_NAME, DEV_USER_EMAIL, DEV_USER_ID, current_user_id


class CurrentUserIdTests(SimpleTestCase):
    def setUp(self):
        self.rf = RequestFactory()

    def test_anonymous_request_is_dev_user(self):
        self.assertEqual(current_user_id(self.rf.get("/")), DEV_USER_ID)

    def test_demo_cookie_is_honoured(self):
        demo = uuid.uuid4()
        req = self.rf.get("/")
        req.COOKIES[DEMO_COOKIE_NAME] = str(demo)
        self.assertEqual(current_user_id(req), demo)

    def test_garbage_cookie_falls_back(self):
        req = self.rf.get("/")
        req.COOKIES[DEMO_COOKIE_NAME] = "not-a-uuid"
        self.assertEqual(current_user_id(req), DEV_USER_ID)

    def test_authenticated_user_with_int_pk(self):
        req = self.rf.get("/")
        req.user = type("U", (), {"is_authenticated": True, "pk": 42})()
        uid = current_user_id(req)
        self.assertEqual(uid, current_user_id(req))
        self.assertNotEqual(uid, DEV_USER_ID)


class AuthEndpointTests(APITestCase):
    def test_current_user_returns_dev_user(self):
        r = self.client.post(reverse("accounts:current_user"), {}, format="json")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["id"], str(DEV_USER_ID))
        self.assertEqual(body["email"], DEV_USER_EMAIL)
        self.assertIn("createdAt", body)

    def test_csrf_endpoint_sets_cookie(self):
        r = self.client.get(reverse("accounts:csrf"))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["csrfToken"])
        self.assertIn("csrftoken", r.cookies)

    def test_csrf_endpoint_is_get_only(self):
        self.assertEqual(self.client.post(reverse("accounts:csrf")).status_code, 405)
