from locust import HttpUser, between, task
import os
import uuid

REST_BASE = os.environ.get("NOVA_SHELL_BASE_URL", "http://localhost:3000")


class DesktopUser(HttpUser):
    host = REST_BASE
    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.username = f"load-{uuid.uuid4().hex[:12]}"
        resp = self.client.post("/api/auth/register", json={"username": self.username, "password": "pw"})
        self.owner_id = resp.json().get("userId") if resp.status_code < 400 else None
        self.record_ids = []
        self.client.post("/api/auth/login", json={"username": self.username, "password": "pw"})

    @task(4)
    def list_files(self):
        if self.owner_id is None:
            return
        self.client.get(f"/api/files/{self.owner_id}", name="/api/files/[owner]")

    @task(2)
    def create_and_edit(self):
        if self.owner_id is None:
            return
        payload = {"ownerId": self.owner_id, "name": "notes.txt", "content": "", "kind": "file", "parentId": None}
        resp = self.client.post("/api/files", json=payload)
        if resp.status_code >= 400:
            return
        record_id = resp.json()["id"]
        self.record_ids.append(record_id)
        self.client.put(
            f"/api/files/{record_id}",
            json={"name": "notes.txt", "content": "saved from load test"},
            name="/api/files/[id]",
        )

    @task(1)
    def delete_oldest(self):
        if not self.record_ids:
            return
        record_id = self.record_ids.pop(0)
        self.client.delete(f"/api/files/{record_id}", name="/api/files/[id]")
