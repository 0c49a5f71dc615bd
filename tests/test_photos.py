import os


def test_upload_stores_file(client, images_dir, make_user, upload):
    alice = make_user("alice")
    photo = upload(alice, name="Beach.PNG")
    assert photo["user_id"] == alice["id"]
    assert photo["file_name"].endswith(".png")
    assert photo["like_count"] == 0
    assert photo["comments"] == []
    assert (images_dir / photo["file_name"]).exists()


def test_upload_requires_image(client, make_user):
    alice = make_user("alice")
    rv = client.post("/photo/new", headers=alice["headers"])
    assert rv.status_code == 400
    rv = client.post(
        "/photo/new",
        files={"photo": ("notes.txt", b"hello", "text/plain")},
        headers=alice["headers"],
    )
    assert rv.status_code == 400


def test_photos_of_user_with_comment_authors(client, make_user, upload, comment):
    alice = make_user("alice", first_name="Alice")
    bob = make_user("bob", first_name="Bob")
    photo = upload(alice)
    comment(bob, photo["_id"], "  great shot  ")

    rv = client.get(f"/photo/user/{alice['id']}", headers=bob["headers"])
    assert rv.status_code == 200
    photos = rv.json()
    assert len(photos) == 1
    assert photos[0]["user"]["first_name"] == "Alice"
    [c] = photos[0]["comments"]
    assert c["comment"] == "great shot"
    assert c["user"] == {"_id": bob["id"], "first_name": "Bob", "last_name": "User"}


def test_photos_of_unknown_user(client, make_user):
    alice = make_user("alice")
    assert client.get("/photo/user/000000000000000000000000", headers=alice["headers"]).status_code == 400


def test_empty_comment_rejected(client, make_user, upload):
    alice = make_user("alice")
    photo = upload(alice)
    rv = client.post(f"/photo/commentsOfPhoto/{photo['_id']}", json={"comment": "   "}, headers=alice["headers"])
    assert rv.status_code == 400


def test_comment_on_missing_photo(client, make_user):
    alice = make_user("alice")
    rv = client.post(
        "/photo/commentsOfPhoto/000000000000000000000000",
        json={"comment": "hi"},
        headers=alice["headers"],
    )
    assert rv.status_code == 400
    assert rv.json()["detail"] == "Photo not found"


def test_only_author_can_edit_comment(client, make_user, upload, comment):
    alice = make_user("alice")
    bob = make_user("bob")
    photo = upload(alice)
    comment_id = comment(bob, photo["_id"], "first")
    url = f"/photo/commentsOfPhoto/{photo['_id']}/{comment_id}"

    assert client.put(url, json={"comment": "hijacked"}, headers=alice["headers"]).status_code == 403
    assert client.put(url, json={"comment": "edited"}, headers=bob["headers"]).status_code == 200

    fetched = client.get(f"/photo/{photo['_id']}", headers=alice["headers"]).json()
    assert [c["comment"] for c in fetched["comments"]] == ["edited"]


def test_only_author_can_delete_comment(client, make_user, upload, comment):
    alice = make_user("alice")
    bob = make_user("bob")
    photo = upload(alice)
    comment_id = comment(bob, photo["_id"], "bye")
    url = f"/photo/commentsOfPhoto/{photo['_id']}/{comment_id}"

    assert client.delete(url, headers=alice["headers"]).status_code == 403
    assert client.delete(url, headers=bob["headers"]).status_code == 200
    assert client.delete(url, headers=bob["headers"]).status_code == 400
    assert client.get(f"/photo/{photo['_id']}", headers=alice["headers"]).json()["comments"] == []


def test_like_toggles(client, db, make_user, upload):
    alice = make_user("alice")
    bob = make_user("bob")
    photo = upload(alice)
    url = f"/photo/{photo['_id']}/like"

    assert client.post(url, headers=bob["headers"]).json() == {"like_count": 1, "is_liked": True}
    assert client.post(url, headers=alice["headers"]).json() == {"like_count": 2, "is_liked": True}
    assert client.post(url, headers=bob["headers"]).json() == {"like_count": 1, "is_liked": False}

    fetched = client.get(f"/photo/{photo['_id']}", headers=alice["headers"]).json()
    assert fetched["like_count"] == 1
    assert fetched["is_liked"] is True
    assert len(db.photos.find_one()["likes"]) == 1


def test_like_missing_photo(client, make_user):
    alice = make_user("alice")
    assert client.post("/photo/000000000000000000000000/like", headers=alice["headers"]).status_code == 400


def test_delete_photo_removes_file_and_document(client, images_dir, make_user, upload):
    alice = make_user("alice")
    bob = make_user("bob")
    photo = upload(alice)
    path = images_dir / photo["file_name"]

    assert client.delete(f"/photo/{photo['_id']}", headers=bob["headers"]).status_code == 403
    assert path.exists()

    rv = client.delete(f"/photo/{photo['_id']}", headers=alice["headers"])
    assert rv.status_code == 200
    assert not path.exists()

    rv = client.get(f"/photo/{photo['_id']}", headers=alice["headers"])
    assert rv.status_code == 400
    assert rv.json()["detail"] == "Photo not found"


def test_delete_photo_with_missing_file(client, images_dir, make_user, upload):
    alice = make_user("alice")
    photo = upload(alice)
    os.remove(images_dir / photo["file_name"])
    assert client.delete(f"/photo/{photo['_id']}", headers=alice["headers"]).status_code == 200


def test_comments_of_user(client, make_user, upload, comment):
    alice = make_user("alice")
    bob = make_user("bob")
    first = upload(alice)
    second = upload(alice)
    comment(bob, first["_id"], "one")
    comment(alice, first["_id"], "mine")
    comment(bob, second["_id"], "two")

    rv = client.get(f"/photo/commentsOf/{bob['id']}", headers=alice["headers"])
    assert rv.status_code == 200
    comments = rv.json()
    assert sorted(c["comment"] for c in comments) == ["one", "two"]
    assert {c["photo_id"] for c in comments} == {first["_id"], second["_id"]}


def test_malformed_photo_id(client, make_user):
    alice = make_user("alice")
    rv = client.get("/photo/not-an-id", headers=alice["headers"])
    assert rv.status_code == 400
    assert rv.json()["detail"] == "Invalid photo ID"
