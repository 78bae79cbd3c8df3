import logging

import pytest
import requests

from conftest import FakeResp, make_resources
from trailwalk import config
from trailwalk.api_client import WalkwayAPI
from trailwalk.errors import (
    WalkwayAPIError,
    WalkwayNotFoundError,
    WalkwayPermissionError,
    WalkwayValidationError,
)
from trailwalk.models import WalkwaySearchParams


def _summary(walkway_id, name="Trail"):
    return {"walkwayId": walkway_id, "name": name, "distance": 1.2, "rating": 4.5}


def test_search_sends_query_and_auth():
    resources, session, limiter = make_resources(
        [FakeResp(200, {"walkways": [_summary(1), _summary(2)], "hasNext": True})]
    )
    page = WalkwayAPI(resources).search_walkways(
        WalkwaySearchParams(latitude=37.5, longitude=127.0, sort="rating")
    )
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "http://test/api/walkways"
    assert call["params"] == {
        "sort": "rating",
        "latitude": 37.5,
        "longitude": 127.0,
        "size": config.DEFAULT_PAGE_SIZE,
    }
    assert call["headers"] == {"Authorization": "Bearer tok-1234"}
    assert call["timeout"] == 5
    assert [w.walkway_id for w in page.walkways] == [1, 2]
    assert page.has_next is True
    assert page.last_id == 2
    assert limiter.statuses == [200]


def test_iter_walkways_follows_cursor():
    resources, session, _ = make_resources(
        [
            FakeResp(200, {"walkways": [_summary(1), _summary(2)], "hasNext": True}),
            FakeResp(200, {"walkways": [_summary(3)], "hasNext": False}),
        ]
    )
    api = WalkwayAPI(resources)
    ids = [
        w.walkway_id
        for w in api.iter_walkways(WalkwaySearchParams(latitude=1.0, longitude=2.0, size=2))
    ]
    assert ids == [1, 2, 3]
    assert "lastId" not in session.calls[0]["params"]
    assert session.calls[1]["params"]["lastId"] == 2


def test_iter_walkways_bare_list_stops_on_short_page():
    resources, session, _ = make_resources(
        [
            FakeResp(200, [_summary(1), _summary(2)]),
            FakeResp(200, [_summary(3)]),
        ]
    )
    api = WalkwayAPI(resources)
    params = WalkwaySearchParams(latitude=1.0, longitude=2.0, size=2)
    assert [w.walkway_id for w in api.iter_walkways(params)] == [1, 2, 3]
    assert len(session.calls) == 2


def test_my_walkways_preview_uses_preview_size():
    resources, session, _ = make_resources([FakeResp(200, [_summary(9)])])
    page = WalkwayAPI(resources).get_my_walkways(preview=True, size=50)
    assert session.calls[0]["url"].endswith("/users/walkways/upload")
    assert session.calls[0]["params"] == {"size": config.PREVIEW_PAGE_SIZE}
    assert page.walkways[0].walkway_id == 9


def test_detail_is_cached_and_invalidated_by_like():
    detail = {"walkwayId": 5, "name": "River", "isLike": True, "hashtags": ["#park", "river"]}
    resources, session, _ = make_resources(
        [
            FakeResp(200, detail),
            FakeResp(204),
            FakeResp(200, dict(detail, isLike=False)),
        ]
    )
    api = WalkwayAPI(resources)
    first = api.get_walkway_detail(5)
    assert first.liked is True
    assert first.hashtags == ["park", "river"]
    assert api.get_walkway_detail(5) is first
    assert len(session.calls) == 1

    assert api.toggle_like(5, is_liked=True) is False
    assert session.calls[1]["method"] == "DELETE"
    assert session.calls[1]["url"] == "http://test/api/walkways/5/likes"

    refreshed = api.get_walkway_detail(5)
    assert refreshed.liked is False
    assert len(session.calls) == 3


def test_like_posts_when_not_liked():
    resources, session, _ = make_resources([FakeResp(200, text="")])
    assert WalkwayAPI(resources).toggle_like(8, is_liked=False) is True
    assert session.calls[0]["method"] == "POST"


def test_create_history_payload_and_result():
    resources, session, _ = make_resources(
        [FakeResp(200, {"walkwayHistoryId": 77, "canReview": True})]
    )
    result = WalkwayAPI(resources).create_walkway_history(3, time=1800, distance=2450)
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://test/api/walkways/3/history"
    assert call["json"] == {"time": 1800, "distance": 2450}
    assert result.walkway_history_id == 77
    assert result.can_review is True


def test_create_history_rejects_negative_values():
    resources, session, _ = make_resources([])
    with pytest.raises(ValueError):
        WalkwayAPI(resources).create_walkway_history(3, time=-1, distance=10)
    assert session.calls == []


def test_histories_listing():
    resources, _, _ = make_resources(
        [
            FakeResp(
                200,
                {
                    "walkwayHistories": [
                        {"walkwayId": 1, "date": "2024-05-01", "distance": 1.5, "time": 600}
                    ],
                    "hasNext": False,
                },
            )
        ]
    )
    records, has_next = WalkwayAPI(resources).get_walkway_histories()
    assert records[0].walkway_id == 1
    assert records[0].time == 600
    assert has_next is False


def test_create_and_delete_walkway():
    resources, session, _ = make_resources(
        [FakeResp(200, {"walkwayId": 12}), FakeResp(204)]
    )
    api = WalkwayAPI(resources)
    assert api.create_walkway({"name": "Hill", "courseImageId": 4}) == 12
    api.delete_walkway(12)
    assert session.calls[1]["method"] == "DELETE"
    assert session.calls[1]["json"] is None


def test_create_walkway_without_id_raises():
    resources, _, _ = make_resources([FakeResp(200, {"unexpected": 1})])
    with pytest.raises(WalkwayAPIError, match="walkwayId"):
        WalkwayAPI(resources).create_walkway({"name": "Hill"})


def test_upload_course_image_bytes():
    resources, session, _ = make_resources([FakeResp(200, {"courseImageId": 4})])
    image_id = WalkwayAPI(resources).upload_course_image(b"\x89PNG", filename="map.png")
    assert image_id == 4
    name, data, mime = session.calls[0]["files"]["courseImage"]
    assert (name, data, mime) == ("map.png", b"\x89PNG", "image/png")


@pytest.mark.parametrize(
    "status,exc_type",
    [(400, WalkwayValidationError), (401, WalkwayPermissionError), (404, WalkwayNotFoundError)],
)
def test_client_errors_are_not_retried(status, exc_type, no_sleep):
    resources, session, _ = make_resources([FakeResp(status, {"message": "bad"})])
    with pytest.raises(exc_type) as excinfo:
        WalkwayAPI(resources).get_walkway_detail(1)
    assert excinfo.value.status_code == status
    assert len(session.calls) == 1
    assert no_sleep == []


def test_server_error_retried_for_get(no_sleep):
    resources, session, _ = make_resources(
        [FakeResp(503, {"message": "busy"}), FakeResp(200, {"walkwayId": 2, "name": "Ok"})]
    )
    detail = WalkwayAPI(resources).get_walkway_detail(2)
    assert detail.name == "Ok"
    assert len(session.calls) == 2
    assert no_sleep == [1.0]


def test_network_error_retried_then_raised(no_sleep, caplog):
    failures = [requests.ConnectionError("boom") for _ in range(config.WALKWAY_MAX_RETRIES)]
    resources, session, _ = make_resources(failures)
    with caplog.at_level(logging.WARNING):
        with pytest.raises(WalkwayAPIError, match="network error ConnectionError"):
            WalkwayAPI(resources).get_walkway_detail(3)
    assert len(session.calls) == config.WALKWAY_MAX_RETRIES
    assert len(no_sleep) == config.WALKWAY_MAX_RETRIES - 1
    assert "retrying" in caplog.text


def test_post_is_not_retried(no_sleep):
    resources, session, _ = make_resources([FakeResp(502, {"message": "gateway"})])
    with pytest.raises(WalkwayAPIError) as excinfo:
        WalkwayAPI(resources).create_walkway_history(1, time=10, distance=5)
    assert excinfo.value.status_code == 502
    assert len(session.calls) == 1
    assert no_sleep == []


def test_rate_limit_retries_are_capped(monkeypatch):
    monkeypatch.setattr(config, "WALKWAY_MAX_RATE_LIMIT_RETRIES", 2)
    resources, session, limiter = make_resources(
        [FakeResp(429, {"message": "slow down"}) for _ in range(3)]
    )
    with pytest.raises(WalkwayAPIError) as excinfo:
        WalkwayAPI(resources).search_walkways(WalkwaySearchParams(latitude=0, longitude=0))
    assert excinfo.value.status_code == 429
    assert len(session.calls) == 3
    assert limiter.statuses == [429, 429, 429]


def test_rate_limited_request_eventually_succeeds():
    resources, session, _ = make_resources(
        [FakeResp(429, headers={"Retry-After": "0"}), FakeResp(200, [_summary(1)])]
    )
    page = WalkwayAPI(resources).search_walkways(WalkwaySearchParams(latitude=0, longitude=0))
    assert page.walkways[0].walkway_id == 1
    assert len(session.calls) == 2


def test_html_page_is_retried(no_sleep):
    resources, session, _ = make_resources(
        [
            FakeResp(200, headers={"Content-Type": "text/html"}, text="<html>down</html>"),
            FakeResp(200, [_summary(4)]),
        ]
    )
    page = WalkwayAPI(resources).get_all_walkways()
    assert page.walkways[0].walkway_id == 4
    assert session.calls[0]["url"].endswith("/walkways/all")
    assert len(no_sleep) == 1


def test_anonymous_requests_send_no_auth(monkeypatch):
    monkeypatch.setattr(config, "WALKWAY_ACCESS_TOKEN", "")
    resources, session, _ = make_resources([FakeResp(200, [])], token=None)
    WalkwayAPI(resources).get_liked_walkways()
    assert session.calls[0]["headers"] == {}
