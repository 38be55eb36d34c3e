import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from board import create_app
from board.config import Config


class FakeStat:
    content_type = "text/plain"

    def __init__(self, size):
        self.size = size


class FakeMinioObject:
    def __init__(self, data):
        self._stream = io.BytesIO(data)
        self.closed = False
        self.released = False

    def read(self, amt=None):
        return self._stream.read(amt)

    def close(self):
        self.closed = True

    def release_conn(self):
        self.released = True


class FakeMinio:
    def __init__(self):
        self.objects = {}
        self.responses = []

    def bucket_exists(self, bucket):
        return True

    def put_object(self, bucket_name, object_name, data, length, content_type, **kwargs):
        self.objects[object_name] = data.read()

    def remove_object(self, bucket_name, object_name):
        self.objects.pop(object_name, None)

    def stat_object(self, bucket_name, object_name):
        return FakeStat(len(self.objects[object_name]))

    def get_object(self, bucket_name, object_name):
        response = FakeMinioObject(self.objects[object_name])
        self.responses.append(response)
        return response


class FailingMinio:
    def bucket_exists(self, *args, **kwargs):
        raise RuntimeError("minio down")


class TestBoardRoutes(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        db_fd, cls.db_path = tempfile.mkstemp(suffix=".db")
        os.close(db_fd)
        cls.upload_dir = tempfile.mkdtemp()

        config = type("TestConfig", (Config,), {
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{cls.db_path}",
            "JWT_SECRET_KEY": "test-secret-key-long-enough-for-hs256",
            "UPLOAD_FOLDER": cls.upload_dir,
            "FILE_STORAGE_BACKEND": "local",
        })

        from board.db import db
        from board.services import auth_service

        cls.app = create_app(config)
        cls.client = cls.app.test_client()
        cls.db = db
        cls.auth_service = auth_service

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(cls.upload_dir, ignore_errors=True)
        if os.path.exists(cls.db_path):
            os.remove(cls.db_path)

    def setUp(self):
        with self.app.app_context():
            self.db.drop_all()
            self.db.create_all()
            self.auth_service.register("u1", "pass123", "first")
            self.auth_service.register("u2", "pass123", "second")
        for entry in os.listdir(self.upload_dir):
            shutil.rmtree(os.path.join(self.upload_dir, entry), ignore_errors=True)

    def _auth_header(self, user_id, password="pass123"):
        with self.app.app_context():
            token = self.auth_service.login(user_id, password)["access_token"]
        return {"Authorization": f"Bearer {token}"}

    def _create_post(self, user_id="u1", title="hello", content="world", files=None):
        data = {"title": title, "content": content}
        if files:
            data["files"] = [(io.BytesIO(body), name) for name, body in files]
        return self.client.post(
            "/api/board/posts",
            data=data,
            headers=self._auth_header(user_id),
            content_type="multipart/form-data",
        )

    def _detail(self, post_id):
        return self.client.get(f"/api/board/posts/{post_id}")

    def test_create_post_requires_auth(self):
        response = self.client.post("/api/board/posts", json={"title": "t", "content": "c"})
        self.assertEqual(response.status_code, 401)

    def test_create_post_with_json_body(self):
        response = self.client.post(
            "/api/board/posts",
            json={"title": "plain", "content": "no files"},
            headers=self._auth_header("u1"),
        )
        self.assertEqual(response.status_code, 201)

        detail = self._detail(response.get_json()["post_id"]).get_json()
        self.assertEqual(detail["title"], "plain")
        self.assertEqual(detail["attachments"], [])

    def test_create_post_rejects_blank_title(self):
        response = self._create_post(title="  ")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Title is required")

    def test_create_post_with_attachments_and_download(self):
        response = self._create_post(files=[("a.txt", b"alpha"), ("b.txt", b"beta")])
        self.assertEqual(response.status_code, 201)
        post_id = response.get_json()["post_id"]

        detail = self._detail(post_id)
        self.assertEqual(detail.status_code, 200)
        attachments = detail.get_json()["attachments"]
        self.assertEqual([a["original_name"] for a in attachments], ["a.txt", "b.txt"])
        self.assertEqual(attachments[0]["download_url"], f"/api/board/files/{attachments[0]['id']}")

        download = self.client.get(attachments[0]["download_url"])
        self.assertEqual(download.status_code, 200)
        self.assertEqual(download.data, b"alpha")
        self.assertIn("attachment", download.headers["Content-Disposition"])
        self.assertIn("a.txt", download.headers["Content-Disposition"])
        download.close()

        path = self.client.get(f"/api/board/files/{attachments[1]['id']}/path")
        self.assertEqual(path.status_code, 200)
        self.assertEqual(
            path.get_json(),
            {
                "group_name": "board",
                "save_path": attachments[1]["save_path"],
                "original_name": "b.txt",
            },
        )

    def test_missing_post_and_file_return_not_exists(self):
        response = self._detail(12345)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()["code"], "NOT_EXISTS")

        response = self.client.get("/api/board/files/12345")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()["code"], "NOT_EXISTS")

    def test_list_and_search_posts(self):
        for title in ["foo bar", "something", "more foo"]:
            self.assertEqual(self._create_post(title=title).status_code, 201)

        listed = self.client.get("/api/board/posts?page=1&size=2")
        self.assertEqual(listed.status_code, 200)
        body = listed.get_json()
        self.assertEqual([p["title"] for p in body["items"]], ["more foo", "something"])
        self.assertEqual(body["paging"]["total"], 3)
        self.assertEqual(body["paging"]["total_pages"], 2)
        self.assertEqual(body["paging"]["current_page"], 1)

        searched = self.client.get("/api/board/posts/search?keyword=foo")
        self.assertEqual(searched.status_code, 200)
        self.assertEqual(
            [p["title"] for p in searched.get_json()["items"]],
            ["more foo", "foo bar"],
        )

    def test_update_post_with_deleted_and_new_files(self):
        post_id = self._create_post(files=[("a.txt", b"a"), ("b.txt", b"b")]).get_json()["post_id"]
        first, second = self._detail(post_id).get_json()["attachments"]

        response = self.client.put(
            f"/api/board/posts/{post_id}",
            data={
                "title": "edited",
                "content": "edited body",
                "del_files": str(first["id"]),
                "files": [(io.BytesIO(b"c"), "c.txt")],
            },
            headers=self._auth_header("u1"),
            content_type="multipart/form-data",
        )
        self.assertEqual(response.status_code, 200)

        detail = self._detail(post_id).get_json()
        self.assertEqual(detail["title"], "edited")
        self.assertEqual(
            [a["original_name"] for a in detail["attachments"]],
            ["b.txt", "c.txt"],
        )
        self.assertEqual(detail["attachments"][0]["id"], second["id"])
        self.assertEqual(self.client.get(f"/api/board/files/{first['id']}").status_code, 404)
        self.assertFalse(os.path.exists(os.path.join(self.upload_dir, first["save_path"])))

    def test_update_rejects_malformed_attachment_ids(self):
        post_id = self._create_post().get_json()["post_id"]

        response = self.client.put(
            f"/api/board/posts/{post_id}",
            json={"title": "t", "content": "c", "del_files": ["abc"]},
            headers=self._auth_header("u1"),
        )
        self.assertEqual(response.status_code, 400)

    def test_update_and_remove_by_another_member_are_forbidden(self):
        post_id = self._create_post(files=[("a.txt", b"a")]).get_json()["post_id"]

        update = self.client.put(
            f"/api/board/posts/{post_id}",
            json={"title": "hijacked", "content": "body"},
            headers=self._auth_header("u2"),
        )
        self.assertEqual(update.status_code, 403)
        self.assertEqual(update.get_json()["code"], "UNAUTHORIZED_REQUEST")

        remove = self.client.delete(
            f"/api/board/posts/{post_id}",
            headers=self._auth_header("u2"),
        )
        self.assertEqual(remove.status_code, 403)

        detail = self._detail(post_id).get_json()
        self.assertEqual(detail["title"], "hello")
        self.assertEqual(len(detail["attachments"]), 1)

    def test_remove_post(self):
        post_id = self._create_post(files=[("a.txt", b"a")]).get_json()["post_id"]
        attachment = self._detail(post_id).get_json()["attachments"][0]

        response = self.client.delete(
            f"/api/board/posts/{post_id}",
            headers=self._auth_header("u1"),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._detail(post_id).status_code, 404)
        self.assertFalse(os.path.exists(os.path.join(self.upload_dir, attachment["save_path"])))

    def test_create_post_stores_files_in_minio_when_configured(self):
        fake = FakeMinio()
        self.app.config["FILE_STORAGE_BACKEND"] = "minio"
        try:
            with patch("board.services.file_service.get_minio_client", return_value=fake):
                response = self._create_post(files=[("a.txt", b"alpha")])
        finally:
            self.app.config["FILE_STORAGE_BACKEND"] = "local"

        self.assertEqual(response.status_code, 201)
        attachment = self._detail(response.get_json()["post_id"]).get_json()["attachments"][0]
        self.assertEqual(fake.objects[attachment["save_path"]], b"alpha")

    def test_download_from_minio_releases_connection(self):
        fake = FakeMinio()
        self.app.config["FILE_STORAGE_BACKEND"] = "minio"
        try:
            with patch("board.services.file_service.get_minio_client", return_value=fake):
                post_id = self._create_post(files=[("a.txt", b"alpha")]).get_json()["post_id"]
                attachment = self._detail(post_id).get_json()["attachments"][0]

                download = self.client.get(attachment["download_url"])
                self.assertEqual(download.status_code, 200)
                self.assertEqual(download.data, b"alpha")
                self.assertEqual(download.headers["Content-Length"], "5")
                download.close()
        finally:
            self.app.config["FILE_STORAGE_BACKEND"] = "local"

        self.assertEqual(len(fake.responses), 1)
        self.assertTrue(fake.responses[0].closed)
        self.assertTrue(fake.responses[0].released)

    def test_download_keeps_non_ascii_filename(self):
        post_id = self._create_post(files=[("보고서.txt", b"report")]).get_json()["post_id"]
        attachment = self._detail(post_id).get_json()["attachments"][0]
        self.assertEqual(attachment["original_name"], "보고서.txt")

        download = self.client.get(attachment["download_url"])
        self.assertEqual(download.status_code, 200)
        self.assertEqual(download.data, b"report")
        self.assertIn("filename*=UTF-8''", download.headers["Content-Disposition"])
        download.close()

    def test_update_rejects_boolean_and_non_positive_attachment_ids(self):
        post_id = self._create_post(files=[("a.txt", b"a")]).get_json()["post_id"]

        for bad_ids in ([True], [-1], [0], ["0"], ["-3"], [1.5]):
            response = self.client.put(
                f"/api/board/posts/{post_id}",
                json={"title": "changed", "content": "c", "del_files": bad_ids},
                headers=self._auth_header("u1"),
            )
            self.assertEqual(response.status_code, 400, bad_ids)

        detail = self._detail(post_id).get_json()
        self.assertEqual(detail["title"], "hello")
        self.assertEqual(len(detail["attachments"]), 1)

    def test_create_post_returns_503_when_storage_fails(self):
        self.app.config["FILE_STORAGE_BACKEND"] = "minio"
        try:
            with patch("board.services.file_service.get_minio_client", return_value=FailingMinio()):
                response = self._create_post(files=[("a.txt", b"alpha")])
        finally:
            self.app.config["FILE_STORAGE_BACKEND"] = "local"

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.get_json()["code"], "FILE_STORAGE_ERROR")

        listed = self.client.get("/api/board/posts").get_json()
        self.assertEqual(listed["paging"]["total"], 0)


if __name__ == "__main__":
    unittest.main()
