# REST bindings for the mobile/front-end side: one function per backend endpoint.

import httpx


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


# Wraps the HTTP API around any httpx.Client pointed at the backend (deployed server or in-process test app)
class FeedClient:
    def __init__(self, http: httpx.Client, token: str | None = None):
        self.http = http
        self.token = token

    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method, path, **kwargs):
        res = self.http.request(method, path, headers=self._headers(), **kwargs)
        if res.status_code >= 400:
            try:
                message = res.json().get("message", res.text)
            except ValueError:
                message = res.text
            raise ApiError(res.status_code, message)
        return res.json()

    # -------------------------------
    # Authentication
    # -------------------------------

    def register(self, username, email, password, bio=""):
        data = self._request("POST", "/auth/register", json={
            "username": username,
            "email": email,
            "password": password,
            "bio": bio,
        })
        self.token = data["token"]
        return data["user"]

    def login(self, email, password):
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def logout(self):
        self.token = None

    def me(self):
        return self._request("GET", "/auth/me")["user"]

    # -------------------------------
    # Posts
    # -------------------------------

    def feed(self, limit=10, offset=0, following=False):
        params = {"limit": limit, "offset": offset}
        if following:
            params["following"] = "true"
        return self._request("GET", "/posts", params=params)

    def get_post(self, post_id):
        return self._request("GET", f"/posts/{post_id}")["post"]

    def create_post(self, filename, content, caption="", content_type="image/jpeg"):
        files = {"image": (filename, content, content_type)}
        return self._request("POST", "/posts", files=files, data={"caption": caption})["post"]

    def toggle_like(self, post_id):
        return self._request("POST", f"/posts/{post_id}/like")["liked"]

    def comments(self, post_id):
        return self._request("GET", f"/posts/{post_id}/comments")["comments"]

    def add_comment(self, post_id, text):
        return self._request("POST", f"/posts/{post_id}/comments", json={"text": text})["comment"]

    def user_posts(self, user_id):
        return self._request("GET", f"/posts/user/{user_id}")["posts"]

    # -------------------------------
    # Profiles & follows
    # -------------------------------

    def profile(self, user_id):
        return self._request("GET", f"/users/{user_id}")

    def update_profile(self, user_id, username=None, bio=None):
        payload = {k: v for k, v in {"username": username, "bio": bio}.items() if v is not None}
        return self._request("PUT", f"/users/{user_id}", json=payload)["user"]

    def upload_avatar(self, user_id, filename, content, content_type="image/jpeg"):
        files = {"avatar": (filename, content, content_type)}
        return self._request("POST", f"/users/{user_id}/avatar", files=files)["user"]

    def follow(self, user_id):
        return self._request("POST", f"/users/{user_id}/follow")["follow"]

    def unfollow(self, user_id):
        return self._request("POST", f"/users/{user_id}/unfollow")

    def is_following(self, user_id):
        return self._request("GET", f"/users/{user_id}/isFollowing")["isFollowing"]
