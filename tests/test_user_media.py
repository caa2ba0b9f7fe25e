import pytest
from fastapi import status

from mediatracker.models import Media, MediaStatus, Review, UserMedia
from mediatracker.repository import Repository, UserMediaRepository


@pytest.fixture()
def movie(db_session):
    return Repository(db_session, Media).create(Media(title="Blade Runner", type="movie"))


@pytest.fixture()
def watching(db_session, alice, movie):
    return UserMediaRepository(db_session).create(
        UserMedia(user_id=alice.id, media_id=movie.id, status=MediaStatus.WATCHING.value)
    )


def update_payload(user_media, **changes):
    payload = {
        "user_id": user_media.user_id,
        "user_media_id": user_media.id,
        "status": "Watching",
    }
    payload.update(changes)
    return payload


def reviews_in_store(db_session):
    db_session.expire_all()
    return Repository(db_session, Review).get_all()


def test_track_media_without_review(client, db_session, alice, movie, headers):
    response = client.post(
        "/user-media/",
        json={"user_id": alice.id, "media_id": movie.id, "status": "Finished"},
        headers=headers(alice),
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["status"] == "Finished"
    assert response.json()["review_id"] is None
    assert reviews_in_store(db_session) == []

    duplicate = client.post(
        "/user-media/",
        json={"user_id": alice.id, "media_id": movie.id},
        headers=headers(alice),
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT


def test_track_rejects_unknown_media_and_status(client, alice, movie, headers):
    missing = client.post(
        "/user-media/", json={"user_id": alice.id, "media_id": 999}, headers=headers(alice)
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    bad_status = client.post(
        "/user-media/",
        json={"user_id": alice.id, "media_id": movie.id, "status": "Dropped"},
        headers=headers(alice),
    )
    assert bad_status.status_code == status.HTTP_400_BAD_REQUEST


def test_first_rating_creates_linked_review(client, db_session, watching, alice, headers):
    response = client.put(
        "/user-media/",
        json=update_payload(watching, user_rating="Good", review_text=""),
        headers=headers(alice),
    )
    assert response.status_code == status.HTTP_200_OK

    reviews = reviews_in_store(db_session)
    assert len(reviews) == 1
    assert (reviews[0].rating, reviews[0].text) == ("Good", "")
    assert response.json()["review_id"] == reviews[0].id
    assert UserMediaRepository(db_session).get(UserMedia.id == watching.id).review_id == reviews[0].id


def test_same_submission_twice_keeps_one_review(client, db_session, watching, alice, headers):
    payload = update_payload(watching, user_rating="Excellent", review_text="A classic")
    first = client.put("/user-media/", json=payload, headers=headers(alice))
    second = client.put("/user-media/", json=payload, headers=headers(alice))
    assert first.status_code == second.status_code == status.HTTP_200_OK

    reviews = reviews_in_store(db_session)
    assert len(reviews) == 1
    assert (reviews[0].rating, reviews[0].text) == ("Excellent", "A classic")


def test_status_change_without_review_data(client, db_session, watching, alice, headers):
    response = client.put(
        "/user-media/",
        json=update_payload(watching, status="Finished", note="Rewatch later"),
        headers=headers(alice),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "Finished"
    assert response.json()["note"] == "Rewatch later"
    assert reviews_in_store(db_session) == []


def test_invalid_rating_fails_without_side_effects(client, db_session, watching, alice, headers):
    response = client.put(
        "/user-media/",
        json=update_payload(
            watching, status="Finished", user_rating="Superb", review_text="Great"
        ),
        headers=headers(alice),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert reviews_in_store(db_session) == []
    stored = UserMediaRepository(db_session).get(UserMedia.id == watching.id)
    assert stored.status == MediaStatus.WATCHING


def test_update_checks_ownership_before_existence(client, watching, alice, bob, admin, headers):
    foreign = client.put(
        "/user-media/", json=update_payload(watching, user_rating="Bad"), headers=headers(bob)
    )
    assert foreign.status_code == status.HTTP_403_FORBIDDEN

    # a missing row of another user is indistinguishable from an existing one
    missing = client.put(
        "/user-media/",
        json={"user_id": alice.id, "user_media_id": 999, "status": "Watching"},
        headers=headers(bob),
    )
    assert missing.status_code == status.HTTP_403_FORBIDDEN

    as_admin = client.put(
        "/user-media/",
        json={"user_id": alice.id, "user_media_id": 999, "status": "Watching"},
        headers=headers(admin),
    )
    assert as_admin.status_code == status.HTTP_404_NOT_FOUND

    # the row exists but belongs to someone else than the given user id
    mismatched = client.put(
        "/user-media/",
        json={"user_id": bob.id, "user_media_id": watching.id, "status": "Watching"},
        headers=headers(bob),
    )
    assert mismatched.status_code == status.HTTP_404_NOT_FOUND


def test_list_with_status_filter(client, db_session, watching, alice, bob, headers):
    other = Repository(db_session, Media).create(Media(title="Breaking Bad"))
    UserMediaRepository(db_session).create(
        UserMedia(user_id=alice.id, media_id=other.id, status=MediaStatus.WISHLIST.value)
    )

    everything = client.get("/user-media/", params={"user_id": alice.id}, headers=headers(alice))
    assert len(everything.json()) == 2

    wishlist = client.get(
        "/user-media/",
        params={"user_id": alice.id, "status": "Wishlist"},
        headers=headers(alice),
    )
    assert [item["media_id"] for item in wishlist.json()] == [other.id]

    assert (
        client.get("/user-media/", params={"user_id": alice.id}, headers=headers(bob)).status_code
        == 403
    )


def test_delete_user_media_removes_review(client, db_session, watching, alice, bob, headers):
    client.put(
        "/user-media/",
        json=update_payload(watching, user_rating="Average", review_text="Fine"),
        headers=headers(alice),
    )

    assert client.delete(f"/user-media/{watching.id}", headers=headers(bob)).status_code == 403
    assert client.delete(f"/user-media/{watching.id}", headers=headers(alice)).status_code == 204
    assert client.delete(f"/user-media/{watching.id}", headers=headers(alice)).status_code == 404
    assert reviews_in_store(db_session) == []


def test_review_routes(client, db_session, watching, movie, alice, bob, headers):
    client.put(
        "/user-media/",
        json=update_payload(watching, user_rating="Good", review_text="Tears in rain"),
        headers=headers(alice),
    )
    review_id = reviews_in_store(db_session)[0].id

    own = client.get("/reviews/", params={"user_id": alice.id}, headers=headers(alice))
    assert [item["text"] for item in own.json()] == ["Tears in rain"]

    by_media = client.get(
        "/reviews/",
        params={"user_id": alice.id, "media_id": movie.id},
        headers=headers(alice),
    )
    assert [item["id"] for item in by_media.json()] == [review_id]

    assert client.get(f"/reviews/{review_id}", headers=headers(alice)).json()["rating"] == "Good"
    assert client.get(f"/reviews/{review_id}", headers=headers(bob)).status_code == 403
    assert client.get("/reviews/999", headers=headers(bob)).status_code == 404
    assert (
        client.get("/reviews/", params={"user_id": alice.id}, headers=headers(bob)).status_code
        == 403
    )
