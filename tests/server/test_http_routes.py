import json
import unittest

from server.routes import HttpRoutes


class HttpRoutesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = None
        self.routes = HttpRoutes(b"<html>ui</html>", lambda: self.session)

    def test_index_is_served_on_root_and_index_paths(self) -> None:
        for path in ("/", "/index.html"):
            with self.subTest(path=path):
                response = self.routes.resolve(path)
                self.assertEqual(200, response.status_code)
                self.assertEqual(b"<html>ui</html>", response.body)
                self.assertTrue(response.headers["Content-Type"].startswith("text/html"))

    def test_healthz_and_unknown_paths(self) -> None:
        self.assertEqual(b"ok\n", self.routes.resolve("/healthz").body)
        self.assertEqual(404, self.routes.resolve("/missing").status_code)

    def test_session_snapshot_reflects_latest_payload(self) -> None:
        self.assertEqual(503, self.routes.resolve("/api/session").status_code)

        self.session = {"phase": "working", "display": "24:59"}
        response = self.routes.resolve("/api/session")

        self.assertEqual(200, response.status_code)
        self.assertEqual("application/json", response.headers["Content-Type"])
        self.assertEqual(self.session, json.loads(response.body))
        self.assertEqual("no-store", response.headers["Cache-Control"])


if __name__ == "__main__":
    unittest.main()
