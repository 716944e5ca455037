"""
Tests for the asset library API and media metadata extraction.
"""
import io
import json

import pytest
from PIL import Image

from statusmaker.core.config import settings
from statusmaker.models import Asset, TemplateAsset
from statusmaker.models.asset import human_file_size
from statusmaker.utils.media_metadata import extract_metadata


def png_bytes(width=64, height=32, color=(255, 0, 0)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


LOTTIE = json.dumps({"v": "5.7.4", "w": 512, "h": 256, "fr": 30, "ip": 0, "op": 90, "layers": []}).encode()


def upload(client, headers, content=None, filename="hero.png", mime="image/png", **form):
    data = {"file_type": "image", "is_public": "true"}
    data.update(form)
    return client.post(
        "/api/admin/assets",
        files={"file": (filename, io.BytesIO(content if content is not None else png_bytes()), mime)},
        data=data,
        headers=headers,
    )


@pytest.mark.unit
class TestMediaMetadata:
    def test_image(self):
        assert extract_metadata(png_bytes(40, 20), "image") == {
            "width": 40, "height": 20, "format": "image/png"
        }

    def test_unreadable_image(self):
        assert extract_metadata(b"not an image", "image") == {}

    def test_lottie(self):
        assert extract_metadata(LOTTIE, "lottie") == {
            "width": 512, "height": 256, "frame_rate": 30, "duration": 3.0
        }

    def test_lottie_not_json(self):
        assert extract_metadata(b"{broken", "lottie") == {}

    def test_placeholders(self):
        assert extract_metadata(b"...", "video") == {"duration": 0, "width": 0, "height": 0}
        assert extract_metadata(b"...", "audio") == {"duration": 0, "bitrate": 0}


@pytest.mark.unit
class TestHumanFileSize:
    @pytest.mark.parametrize("num_bytes,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1024 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (int(2.25 * 1024 ** 3), "2.25 GB"),
    ])
    def test_format(self, num_bytes, expected):
        assert human_file_size(num_bytes) == expected


class TestAssetUpload:
    def test_upload_image(self, client, auth_headers, upload_dir):
        response = upload(client, auth_headers, name="Hero banner")
        assert response.status_code == 201

        data = response.json()
        assert data["name"] == "Hero banner"
        assert data["original_name"] == "hero.png"
        assert data["file_type"] == "image"
        assert data["mime_type"] == "image/png"
        assert data["metadata"] == {"width": 64, "height": 32, "format": "image/png"}
        assert data["file_path"].startswith("assets/image/")
        assert (upload_dir / data["file_path"]).exists()

    def test_name_defaults_to_filename(self, client, auth_headers):
        assert upload(client, auth_headers).json()["name"] == "hero.png"

    def test_upload_lottie(self, client, auth_headers):
        response = upload(
            client, auth_headers, content=LOTTIE, filename="confetti.json",
            mime="application/json", file_type="lottie",
        )
        data = response.json()
        assert data["file_type"] == "lottie"
        assert data["metadata"]["duration"] == 3.0

    def test_unknown_file_type(self, client, auth_headers):
        response = upload(client, auth_headers, file_type="pdf")
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "file_type"

    def test_empty_file(self, client, auth_headers):
        assert upload(client, auth_headers, content=b"").status_code == 400

    def test_size_cap(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
        assert upload(client, auth_headers).status_code == 400


class TestAssetQueries:
    def test_list_filters(self, client, auth_headers):
        upload(client, auth_headers, name="Red frame")
        upload(client, auth_headers, name="Blue frame", is_public="false", content=png_bytes(color=(0, 0, 255)))
        upload(client, auth_headers, content=LOTTIE, filename="confetti.json", mime="application/json", file_type="lottie")

        everything = client.get("/api/admin/assets", headers=auth_headers).json()
        assert everything["total"] == 3
        assert everything["assets"][0]["name"] == "confetti.json"

        oldest_first = client.get("/api/admin/assets?order=asc", headers=auth_headers).json()
        assert oldest_first["assets"][0]["name"] == "Red frame"

        lottie = client.get("/api/admin/assets?file_type=lottie", headers=auth_headers).json()
        assert [a["name"] for a in lottie["assets"]] == ["confetti.json"]

        private = client.get("/api/admin/assets?is_public=false", headers=auth_headers).json()
        assert [a["name"] for a in private["assets"]] == ["Blue frame"]

        frames = client.get("/api/admin/assets?search=frame", headers=auth_headers).json()
        assert {a["name"] for a in frames["assets"]} == {"Red frame", "Blue frame"}

    def test_show_includes_templates(self, client, auth_headers, make_template):
        asset_id = upload(client, auth_headers).json()["id"]
        template = make_template(name="Poster")
        client.post(
            f"/api/admin/templates/{template.id}/assets",
            json={"asset_id": asset_id, "layer_name": "image_1"},
            headers=auth_headers,
        )

        data = client.get(f"/api/admin/assets/{asset_id}", headers=auth_headers).json()
        assert data["templates"] == [
            {"id": template.id, "name": "Poster", "slug": "poster", "layer_name": "image_1"}
        ]

    def test_missing_asset(self, client, auth_headers):
        assert client.get("/api/admin/assets/42", headers=auth_headers).status_code == 404


class TestAssetMutations:
    def test_update(self, client, auth_headers):
        asset_id = upload(client, auth_headers).json()["id"]
        response = client.put(
            f"/api/admin/assets/{asset_id}", json={"name": "Renamed", "is_public": False}, headers=auth_headers
        )
        assert response.json()["name"] == "Renamed"
        assert response.json()["is_public"] is False

    def test_replace_file(self, client, auth_headers, upload_dir):
        original = upload(client, auth_headers).json()

        response = client.post(
            f"/api/admin/assets/{original['id']}/replace",
            files={"file": ("wide.png", io.BytesIO(png_bytes(200, 100)), "image/png")},
            headers=auth_headers,
        )
        data = response.json()
        assert data["id"] == original["id"]
        assert data["original_name"] == "wide.png"
        assert data["metadata"]["width"] == 200
        assert not (upload_dir / original["file_path"]).exists()
        assert (upload_dir / data["file_path"]).exists()

    def test_download(self, client, auth_headers):
        content = png_bytes()
        asset_id = upload(client, auth_headers, content=content).json()["id"]

        response = client.get(f"/api/admin/assets/{asset_id}/download", headers=auth_headers)
        assert response.status_code == 200
        assert response.content == content
        assert response.headers["content-type"] == "image/png"

    def test_identical_uploads_keep_separate_files(self, client, auth_headers):
        content = png_bytes()
        first = upload(client, auth_headers, content=content).json()
        second = upload(client, auth_headers, content=content).json()
        assert first["file_path"] != second["file_path"]

        assert client.delete(f"/api/admin/assets/{first['id']}", headers=auth_headers).status_code == 200

        response = client.get(f"/api/admin/assets/{second['id']}/download", headers=auth_headers)
        assert response.status_code == 200
        assert response.content == content

    def test_download_missing_file(self, client, auth_headers, upload_dir):
        data = upload(client, auth_headers).json()
        (upload_dir / data["file_path"]).unlink()

        response = client.get(f"/api/admin/assets/{data['id']}/download", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_cascades_links_and_file(self, client, auth_headers, make_template, upload_dir, db_session):
        data = upload(client, auth_headers).json()
        template = make_template()
        client.post(
            f"/api/admin/templates/{template.id}/assets",
            json={"asset_id": data["id"], "layer_name": "image_1"},
            headers=auth_headers,
        )

        response = client.delete(f"/api/admin/assets/{data['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert not (upload_dir / data["file_path"]).exists()

        db_session.expire_all()
        assert db_session.query(Asset).count() == 0
        assert db_session.query(TemplateAsset).count() == 0
