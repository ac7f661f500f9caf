from fastapi.testclient import TestClient
from conftest import PNG_BYTES
from social_feed.main import create_app


def test_create_post_requires_auth(client):
    res = client.post("/posts", files={"image": ("photo.png", PNG_BYTES, "image/png")})
    assert res.status_code == 401


def test_create_post_requires_image(client, register):
    _, alice = register("alice", "alice@x.com")
    res = client.post("/posts", headers=alice, data={"caption": "no picture"})
    assert res.status_code == 400
    assert res.json() == {"message": "Image is required"}


def test_create_post_rejects_non_images(client, register):
    _, alice = register("alice", "alice@x.com")
    res = client.post("/posts", headers=alice, files={"image": ("notes.txt", b"hello", "text/plain")})
    assert res.status_code == 400

    res = client.post("/posts", headers=alice, files={"image": ("fake.png", b"hello", "text/plain")})
    assert res.status_code == 400


def test_created_post_is_served(client, register, make_post):
    alice_user, alice = register("alice", "alice@x.com")
    post = make_post(alice, caption="  hello  ")
    assert post["caption"] == "hello"
    assert post["user_id"] == alice_user["id"]
    assert post["like_count"] == 0

    res = client.get(post["image_url"])
    assert res.status_code == 200
    assert res.content == PNG_BYTES


def test_get_single_post(client, register, make_post):
    _, alice = register("alice", "alice@x.com")
    post = make_post(alice, caption="one")
    res = client.get(f"/posts/{post['id']}")
    assert res.status_code == 200
    assert res.json()["post"]["caption"] == "one"


def test_get_missing_post(client):
    res = client.get("/posts/999")
    assert res.status_code == 404
    assert res.json() == {"message": "Post not found"}


def test_non_numeric_post_id_is_a_validation_error(client):
    res = client.get("/posts/abc")
    assert res.status_code == 400
    assert "message" in res.json()


def test_like_toggles(client, register, make_post):
    _, alice = register("alice", "alice@x.com")
    post = make_post(alice)

    first = client.post(f"/posts/{post['id']}/like", headers=alice)
    assert first.status_code == 200
    assert first.json()["liked"] is True
    assert client.get(f"/posts/{post['id']}").json()["post"]["like_count"] == 1

    second = client.post(f"/posts/{post['id']}/like", headers=alice)
    assert second.json()["liked"] is False
    assert client.get(f"/posts/{post['id']}").json()["post"]["like_count"] == 0


def test_like_requires_auth_and_existing_post(client, register):
    _, alice = register("alice", "alice@x.com")
    assert client.post("/posts/1/like").status_code == 401
    assert client.post("/posts/999/like", headers=alice).status_code == 404


def test_comments_flow(client, register, make_post):
    _, alice = register("alice", "alice@x.com")
    _, bob = register("bob", "bob@x.com")
    post = make_post(alice)

    res = client.post(f"/posts/{post['id']}/comments", headers=bob, json={"text": "  first!  "})
    assert res.status_code == 201
    comment = res.json()["comment"]
    assert comment["text"] == "first!"
    assert comment["author"]["username"] == "bob"

    client.post(f"/posts/{post['id']}/comments", headers=alice, json={"text": "thanks"})

    comments = client.get(f"/posts/{post['id']}/comments").json()["comments"]
    assert [c["text"] for c in comments] == ["first!", "thanks"]
    assert client.get(f"/posts/{post['id']}").json()["post"]["comment_count"] == 2


def test_blank_comment_rejected(client, register, make_post):
    _, alice = register("alice", "alice@x.com")
    post = make_post(alice)
    res = client.post(f"/posts/{post['id']}/comments", headers=alice, json={"text": "   "})
    assert res.status_code == 400
    assert res.json() == {"message": "Comment text is required"}


def test_overlong_comment_rejected(client, register, make_post):
    _, alice = register("alice", "alice@x.com")
    post = make_post(alice)
    res = client.post(f"/posts/{post['id']}/comments", headers=alice, json={"text": "x" * 1025})
    assert res.status_code == 400


def test_comments_on_missing_post(client, register):
    _, alice = register("alice", "alice@x.com")
    assert client.get("/posts/999/comments").status_code == 404
    assert client.post("/posts/999/comments", headers=alice, json={"text": "hi"}).status_code == 404


def test_posts_by_author(client, register, make_post):
    alice_user, alice = register("alice", "alice@x.com")
    _, bob = register("bob", "bob@x.com")
    make_post(alice, caption="a1")
    make_post(alice, caption="a2")
    make_post(bob, caption="b1")

    posts = client.get(f"/posts/user/{alice_user['id']}").json()["posts"]
    assert sorted(p["caption"] for p in posts) == ["a1", "a2"]
    assert all(p["user_id"] == alice_user["id"] for p in posts)


def test_out_of_range_ids_are_validation_errors(client, register):
    _, alice = register("alice", "alice@x.com")
    huge = "99999999999999999999"
    for path in (f"/posts/{huge}", f"/posts/{huge}/comments", f"/posts/user/{huge}", f"/posts/{2**31}"):
        res = client.get(path)
        assert res.status_code == 400, path
        assert "message" in res.json()
    assert client.post(f"/posts/{huge}/like", headers=alice).status_code == 400


def test_oversized_upload_rejected(settings):
    small = settings.model_copy(update={"max_upload_bytes": 16})
    with TestClient(create_app(small)) as c:
        res = c.post("/auth/register", json={"username": "alice", "email": "alice@x.com", "password": "pw123"})
        headers = {"Authorization": f"Bearer {res.json()['token']}"}

        res = c.post("/posts", headers=headers, files={"image": ("big.png", PNG_BYTES, "image/png")})
        assert res.status_code == 400
        assert res.json() == {"message": "Uploaded file is larger than 16 bytes"}

        res = c.post("/posts", headers=headers, files={"image": ("ok.png", PNG_BYTES[:16], "image/png")})
        assert res.status_code == 201
