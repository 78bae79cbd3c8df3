import pytest

from conftest import FakeResp, make_resources
from trailwalk.api_client import BookmarkAPI, ReviewAPI
from trailwalk.errors import WalkwayAPIError


def test_review_rating_defaults_missing_counts():
    resources, session, _ = make_resources(
        [FakeResp(200, {"rating": 4.2, "reviewCount": 5, "five": 3, "four": 2})]
    )
    rating = ReviewAPI(resources).get_review_rating(11)
    assert session.calls[0]["url"] == "http://test/api/walkways/11/review/rating"
    assert rating.rating == pytest.approx(4.2)
    assert (rating.five, rating.four, rating.three, rating.two, rating.one) == (3, 2, 0, 0, 0)


def test_review_rating_rejects_non_object():
    resources, _, _ = make_resources([FakeResp(200, [1, 2])])
    with pytest.raises(WalkwayAPIError):
        ReviewAPI(resources).get_review_rating(11)


def test_review_contents_paging_params():
    resources, session, _ = make_resources(
        [
            FakeResp(
                200,
                {
                    "reviews": [
                        {"reviewId": 3, "nickname": "walker", "rating": 5, "content": "Nice"}
                    ],
                    "hasNext": True,
                },
            )
        ]
    )
    reviews, has_next = ReviewAPI(resources).get_review_contents(
        11, sort="latest", size=5, last_id=20
    )
    assert session.calls[0]["params"] == {"sort": "latest", "size": 5, "lastId": 20}
    assert reviews[0].nickname == "walker"
    assert has_next is True


def test_user_reviews_bare_list():
    resources, _, _ = make_resources(
        [FakeResp(200, [{"reviewId": 1, "walkwayName": "Hill", "rating": 3}])]
    )
    reviews, has_next = ReviewAPI(resources).get_user_reviews()
    assert reviews[0].walkway_name == "Hill"
    assert has_next is None


def test_create_review_validates_and_posts():
    resources, session, _ = make_resources([FakeResp(200, {"reviewId": 99})])
    api = ReviewAPI(resources)
    with pytest.raises(ValueError):
        api.create_review(1, 2, rating=6, content="ok")
    with pytest.raises(ValueError):
        api.create_review(1, 2, rating=4, content="   ")
    assert api.create_review(1, 2, rating=4, content=" Lovely trail ") == 99
    call = session.calls[0]
    assert call["url"] == "http://test/api/walkways/1/histories/2/review"
    assert call["json"] == {"rating": 4, "content": "Lovely trail"}


def test_bookmarks_list_rename_delete():
    resources, session, _ = make_resources(
        [
            FakeResp(200, [{"bookmarkId": 1, "name": "Weekend", "walkwayCount": 4}]),
            FakeResp(204),
            FakeResp(204),
        ]
    )
    api = BookmarkAPI(resources)
    bookmarks = api.get_bookmarks()
    assert bookmarks[0].name == "Weekend"
    assert bookmarks[0].walkway_count == 4

    api.rename_bookmark(1, "  Sunday ")
    assert session.calls[1]["method"] == "PUT"
    assert session.calls[1]["json"] == {"name": "Sunday"}

    api.delete_bookmark(1)
    assert session.calls[2]["method"] == "DELETE"
    assert session.calls[2]["url"] == "http://test/api/bookmarks/1"

    with pytest.raises(ValueError):
        api.rename_bookmark(1, "")
