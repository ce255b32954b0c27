"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from matrixdiag.web.server import app
from tests.corpus_fixture import make_tiny_sources


class TestServer(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)
        cls.files = make_tiny_sources()

    def test_topology(self):
        resp = self.client.post("/api/topology", json={"files": self.files})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(len(data["physicalKeys"]), 12)
        self.assertEqual(len(data["outlines"]), 12)
        self.assertEqual(len(data["bounds"]), 4)
        self.assertEqual(list(data["pinMap"]), ["tiny_left", "tiny_right"])

    def test_topology_error(self):
        resp = self.client.post("/api/topology", json={"files": {"README.md": "hi"}})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["detail"]["reason"], "no_sources")

    def test_missing_layout_error(self):
        resp = self.client.post("/api/topology",
                                json={"files": {"a.keymap": "/ { keymap { }; };"}})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["detail"]["reason"], "no_physical_layout")

    def test_request_validation(self):
        resp = self.client.post("/api/topology", json={})
        self.assertEqual(resp.status_code, 422)

    def test_diagnose(self):
        resp = self.client.post("/api/diagnose",
                                json={"files": self.files, "failing": [3, 4, 5]})
        self.assertEqual(resp.status_code, 200)
        (report,) = resp.json()["reports"]
        self.assertEqual(report["type"], "row")
        self.assertEqual(report["shield"], "tiny_right")
        self.assertEqual(report["keyIndices"], [3, 4, 5])
        self.assertEqual(report["pin"], "pro_micro 4")
        self.assertEqual(report["title"], "Whole row not responding - tiny_right")
        self.assertTrue(report["causes"])

    def test_diagnose_with_database(self):
        resp = self.client.post("/api/diagnose", json={
            "files": self.files,
            "failing": [3, 4, 5],
            "database": {"pins": {"tiny_right_pro_micro 4": {"silk": "D4"}}},
        })
        self.assertEqual(resp.json()["reports"][0]["summary"], "Row 0, pin D4")

    def test_malformed_database_ignored(self):
        resp = self.client.post("/api/diagnose", json={
            "files": self.files, "failing": [3], "database": {"pins": ["oops"]},
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["reports"][0]["type"], "single")

    def test_diagnose_nothing_failing(self):
        resp = self.client.post("/api/diagnose", json={"files": self.files})
        self.assertEqual(resp.json(), {"reports": []})

    def test_template(self):
        resp = self.client.post("/api/template", json={"files": self.files})
        data = resp.json()
        self.assertEqual(len(data["keys"]), 12)
        self.assertIn("tiny_left_pro_micro 21", data["pins"])

    def test_key_at(self):
        resp = self.client.post("/api/key_at", json={"files": self.files, "x": 4.5, "y": 1.5})
        self.assertEqual(resp.json(), {"index": 9})
        resp = self.client.post("/api/key_at", json={"files": self.files, "x": 50, "y": 50})
        self.assertEqual(resp.json(), {"index": None})


if __name__ == "__main__":
    unittest.main()
