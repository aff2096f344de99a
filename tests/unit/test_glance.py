"""Tests for Glance domain parsing, list options and the zone-scoped image pager."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from conftest import glance_payload, image_json, json_response
from glance import (
    GlanceApi,
    Image,
    ImageDetails,
    ImageDetailsPager,
    ImageStatus,
    ListImageOptions,
    parse_image_details,
    parse_images,
)
from pagination import MalformedPaginationError, PageState


class TestDomain:

    def test_image_details_from_json(self):
        details = ImageDetails.from_json(image_json(
            "img-1",
            checksum="abc",
            min_disk="10",
            min_ram=512,
            owner="tenant",
            is_public=True,
            created_at="2012-05-23T16:04:01Z",
            updated_at="2012-05-23T16:05:02.000000",
            properties={"os": "linux"},
        ))

        assert details.id == "img-1"
        assert details.status is ImageStatus.ACTIVE
        assert details.size == 1024
        assert details.min_disk == 10
        assert details.min_ram == 512
        assert details.is_public is True
        assert details.created_at == datetime(2012, 5, 23, 16, 4, 1, tzinfo=timezone.utc)
        assert details.updated_at == datetime(2012, 5, 23, 16, 5, 2)
        assert details.deleted_at is None
        assert details.properties == {"os": "linux"}
        assert details.links[0].href.endswith("/images/img-1")

    def test_unknown_status(self):
        assert ImageDetails.from_json({"id": "x", "status": "exploding"}).status is ImageStatus.UNRECOGNIZED

    def test_image_from_json(self):
        image = Image.from_json({"id": "x", "name": "cirros"})

        assert image == Image(id="x", name="cirros")

    def test_from_head_headers(self):
        details = ImageDetails.from_headers({
            "X-Image-Meta-Id": "img-9",
            "X-Image-Meta-Name": "ubuntu",
            "X-Image-Meta-Status": "queued",
            "X-Image-Meta-Disk_format": "raw",
            "X-Image-Meta-Size": "2048",
            "X-Image-Meta-Is_public": "False",
            "X-Image-Meta-Property-Distro": "ubuntu",
            "Content-Type": "text/html",
        })

        assert details.id == "img-9"
        assert details.status is ImageStatus.QUEUED
        assert details.disk_format == "raw"
        assert details.size == 2048
        assert details.is_public is False
        assert details.properties == {"distro": "ubuntu"}

    def test_from_headers_requires_id(self):
        with pytest.raises(ValueError):
            ImageDetails.from_headers({"X-Image-Meta-Name": "no-id"})


class TestListImageOptions:

    def test_empty_options(self):
        assert ListImageOptions().to_query_params() == {}

    def test_query_params(self):
        options = ListImageOptions(
            name="cirros",
            status=ImageStatus.ACTIVE,
            disk_format="qcow2",
            size_min=1,
            size_max=100,
            sort_key="created_at",
            sort_dir="desc",
            limit=20,
        )

        assert options.to_query_params() == {
            "name": "cirros",
            "status": "active",
            "disk_format": "qcow2",
            "size_min": "1",
            "size_max": "100",
            "sort_key": "created_at",
            "sort_dir": "desc",
            "limit": "20",
        }

    def test_with_marker_preserves_other_fields(self):
        options = ListImageOptions(name="cirros", limit=2)

        paged = options.with_marker("m1")

        assert paged.marker == "m1"
        assert paged.name == "cirros"
        assert paged.limit == 2
        assert options.marker is None

    @pytest.mark.parametrize("kwargs", [
        {"sort_dir": "up"},
        {"limit": 0},
        {"size_min": -1},
    ])
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValueError):
            ListImageOptions(**kwargs)


class TestParser:

    def test_parse_image_details_page(self):
        page = parse_image_details(glance_payload([image_json("a"), image_json("b")], next_marker="b"))

        assert [i.id for i in page] == ["a", "b"]
        assert all(isinstance(i, ImageDetails) for i in page)
        assert page.next_marker == "b"

    def test_parse_images_last_page(self):
        page = parse_images({"images": [{"id": "a", "name": "one"}]})

        assert [i.id for i in page] == ["a"]
        assert page.next_marker is None

    def test_missing_images_key(self):
        with pytest.raises(ValueError, match="images"):
            parse_image_details({"servers": []})

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            parse_images([])

    def test_next_link_without_marker(self):
        payload = {"images": [], "images_links": [{"rel": "next", "href": "https://glance/v1/images?limit=2"}]}

        with pytest.raises(MalformedPaginationError):
            parse_image_details(payload)


class TestImageDetailsPager:

    def test_requires_api(self):
        with pytest.raises(ValueError):
            ImageDetailsPager(None)

    def test_continuation_preserves_filters_and_zone(self):
        image_api = Mock()
        image_api.list_in_detail.side_effect = [
            parse_image_details(glance_payload([image_json("a"), image_json("b")], next_marker="X")),
            parse_image_details(glance_payload([image_json("c")])),
        ]
        glance_api = Mock()
        glance_api.get_image_api_for_zone.return_value = image_api
        options = ListImageOptions(status=ImageStatus.ACTIVE, limit=2)

        iterator = ImageDetailsPager(glance_api).paged("az-1", options)
        ids = [image.id for image in iterator]

        assert ids == ["a", "b", "c"]
        glance_api.get_image_api_for_zone.assert_called_once_with("az-1")
        sent = [c.args[0] for c in image_api.list_in_detail.call_args_list]
        assert sent == [options, options.with_marker("X")]
        assert iterator.state is PageState.EXHAUSTED

    def test_apply_from_already_fetched_page(self):
        image_api = Mock()
        image_api.list_in_detail.return_value = parse_image_details(glance_payload([image_json("c")]))
        glance_api = Mock()
        glance_api.get_image_api_for_zone.return_value = image_api
        first = parse_image_details(glance_payload([image_json("a")], next_marker="a"))

        ids = [i.id for i in ImageDetailsPager(glance_api).apply(first, "az-2")]

        assert ids == ["a", "c"]
        image_api.list_in_detail.assert_called_once_with(ListImageOptions(marker="a"))


class TestGlanceApi:

    def test_requires_endpoints(self):
        with pytest.raises(ValueError):
            GlanceApi({})

    def test_auth_token_header(self, http_session):
        GlanceApi({"az-1": "https://glance/v1"}, auth_token="tok", session=http_session)

        assert http_session.headers["X-Auth-Token"] == "tok"
        assert http_session.headers["Accept"] == "application/json"

    def test_unknown_zone(self, http_session):
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        with pytest.raises(ValueError, match="az-9"):
            api.get_image_api_for_zone("az-9")

    def test_configured_zones_sorted(self, http_session):
        api = GlanceApi({"b": "https://b/v1", "a": "https://a/v1"}, session=http_session)

        assert api.get_configured_zones() == ["a", "b"]

    def test_list_in_detail_request(self, http_session):
        http_session.get.return_value = json_response(glance_payload([image_json("a")]))
        api = GlanceApi({"az-1": "https://glance/v1/"}, session=http_session, timeout=5)

        page = api.get_image_api_for_zone("az-1").list_in_detail(ListImageOptions(name="cirros"))

        http_session.get.assert_called_once_with(
            "https://glance/v1/images/detail", params={"name": "cirros"}, timeout=5
        )
        assert [i.id for i in page] == ["a"]

    def test_list_request(self, http_session):
        http_session.get.return_value = json_response({"images": [{"id": "a"}]})
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        page = api.get_image_api_for_zone("az-1").list()

        assert http_session.get.call_args.args[0] == "https://glance/v1/images"
        assert http_session.get.call_args.kwargs["params"] == {}
        assert isinstance(page.items[0], Image)

    def test_list_in_detail_all_is_lazy_and_follows_markers(self, http_session):
        http_session.get.side_effect = [
            json_response(glance_payload([image_json("a"), image_json("b")], next_marker="X")),
            json_response(glance_payload([image_json("c")])),
        ]
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        iterator = api.list_in_detail_all("az-1", ListImageOptions(limit=2))
        assert http_session.get.call_count == 0

        assert [i.id for i in iterator] == ["a", "b", "c"]
        params = [c.kwargs["params"] for c in http_session.get.call_args_list]
        assert params == [{"limit": "2"}, {"limit": "2", "marker": "X"}]

    def test_list_all(self, http_session):
        http_session.get.return_value = json_response({"images": [{"id": "a"}, {"id": "b"}]})
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        assert [i.id for i in api.list_all("az-1")] == ["a", "b"]

    def test_http_error_propagates(self, http_session):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        http_session.get.return_value = response
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        with pytest.raises(requests.HTTPError):
            list(api.list_in_detail_all("az-1"))
        assert http_session.get.call_count == 1

    def test_get_image(self, http_session):
        response = Mock(status_code=200, headers={"x-image-meta-id": "img-1", "x-image-meta-status": "active"})
        http_session.head.return_value = response
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        details = api.get_image_api_for_zone("az-1").get("img-1")

        http_session.head.assert_called_once_with("https://glance/v1/images/img-1", timeout=30)
        assert details.id == "img-1"
        assert details.status is ImageStatus.ACTIVE

    def test_get_missing_image(self, http_session):
        http_session.head.return_value = Mock(status_code=404)
        api = GlanceApi({"az-1": "https://glance/v1"}, session=http_session)

        assert api.get_image_api_for_zone("az-1").get("nope") is None
