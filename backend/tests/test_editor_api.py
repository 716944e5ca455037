"""
Tests for the public catalogue and the editor endpoints (preview, export,
status polling, preview resolution and renderer callbacks).
"""
import copy

import pytest

from statusmaker.core.config import settings
from statusmaker.models import Asset, ExportJob, TemplateAsset


@pytest.fixture
def renderer_headers(monkeypatch):
    monkeypatch.setattr(settings, "RENDERER_CALLBACK_TOKEN", "render-me")
    return {"X-Renderer-Token": "render-me"}


def export(client, slug, **overrides):
    payload = {
        "customizations": {"text_0": {"content": "Happy 30th"}},
        "format": "mp4",
        "quality": "high",
    }
    payload.update(overrides)
    return client.post(f"/api/templates/{slug}/export", json=payload)


class TestCatalog:
    def test_public_categories(self, client, auth_headers, make_template):
        for name, order in [("Wedding", 2), ("Birthday", 1), ("Hidden", 0)]:
            client.post("/api/admin/categories", json={"name": name, "sort_order": order}, headers=auth_headers)
        hidden = client.get("/api/admin/categories?search=Hidden", headers=auth_headers).json()["categories"][0]
        client.post(f"/api/admin/categories/{hidden['id']}/toggle", headers=auth_headers)
        make_template(category="wedding", status="published")
        make_template(category="wedding", status="draft")

        data = client.get("/api/categories").json()
        assert [c["slug"] for c in data["categories"]] == ["birthday", "wedding"]
        assert data["categories"][1]["templates_count"] == 1

    def test_public_templates_only_published(self, client, make_template):
        make_template(name="Live One", status="published", category="birthday", tags=["cake"])
        make_template(name="Live Two", status="published", category="wedding")
        make_template(name="Draft One", status="draft")
        make_template(name="Old One", status="archived")

        names = {t["name"] for t in client.get("/api/templates").json()["templates"]}
        assert names == {"Live One", "Live Two"}

        assert [t["name"] for t in client.get("/api/templates?category=birthday").json()["templates"]] == ["Live One"]
        assert [t["name"] for t in client.get("/api/templates?tag=cake").json()["templates"]] == ["Live One"]
        assert [t["name"] for t in client.get("/api/templates?search=two").json()["templates"]] == ["Live Two"]

    def test_get_by_slug(self, client, make_template, sample_layout):
        make_template(name="Live One", status="published")
        make_template(name="Draft One", status="draft")

        response = client.get("/api/templates/live-one")
        assert response.status_code == 200
        assert response.json()["layout"] == sample_layout
        assert response.json()["assets"] == []

        assert client.get("/api/templates/draft-one").status_code == 404
        assert client.get("/api/templates/nope").status_code == 404


    def test_private_assets_hidden_from_catalogue(self, client, auth_headers, make_template, db_session):
        template = make_template(name="Festival", status="published")
        for name, is_public in [("Banner", True), ("Watermark", False)]:
            asset = Asset(
                name=name, original_name=f"{name.lower()}.png", file_path=f"assets/image/{name.lower()}.png",
                file_type="image", mime_type="image/png", file_size=1, is_public=is_public,
            )
            db_session.add(asset)
            db_session.flush()
            db_session.add(TemplateAsset(template_id=template.id, asset_id=asset.id, layer_name="image_1"))
        db_session.commit()

        public = client.get("/api/templates/festival").json()
        assert [a["asset"]["name"] for a in public["assets"]] == ["Banner"]

        admin = client.get(f"/api/admin/templates/{template.id}", headers=auth_headers).json()
        assert sorted(a["asset"]["name"] for a in admin["assets"]) == ["Banner", "Watermark"]


class TestPreview:
    def test_preview(self, client, make_template, sample_layout):
        template = make_template(name="Bday", status="published")

        response = client.post(
            f"/api/templates/{template.slug}/preview",
            json={"customizations": {"text_0": {"content": "Happy 30th", "color": "#FF0000"}}},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["layout"]["objects"][0]["content"] == "Happy 30th"
        assert data["layout"]["objects"][0]["color"] == "#FF0000"
        assert data["preview_url"].startswith("/api/preview/")

        # The handle resolves back to the same layout
        token = data["preview_url"].rsplit("/", 1)[1]
        resolved = client.get(f"/api/preview/{token}")
        assert resolved.status_code == 200
        assert resolved.json()["layout"] == data["layout"]

    def test_preview_does_not_touch_template(self, client, make_template, sample_layout, db_session):
        template = make_template(status="published")
        before = copy.deepcopy(template.layout)

        client.post(f"/api/templates/{template.slug}/preview", json={"customizations": {"text_0": {"content": "A"}}})
        client.post(f"/api/templates/{template.slug}/preview", json={"customizations": {"text_0": {"content": "B"}}})

        db_session.expire_all()
        db_session.refresh(template)
        assert template.layout == before
        assert template.version == 1

    def test_preview_requires_published(self, client, make_template):
        template = make_template(status="draft")
        response = client.post(f"/api/templates/{template.slug}/preview", json={"customizations": {}})
        assert response.status_code == 404

    @pytest.mark.parametrize("patch", [
        {"content": "x" * 501},
        {"fontSize": 7},
        {"fontSize": 201},
        {"fontSize": "big"},
        {"color": "red"},
        {"fontFamily": "f" * 101},
        {"textAlign": "justify"},
        {"src": "s" * 501},
        {"size": "large"},
        {"position": [1, 2]},
    ])
    def test_invalid_customization_values(self, client, make_template, patch):
        template = make_template(status="published")
        response = client.post(
            f"/api/templates/{template.slug}/preview", json={"customizations": {"text_0": patch}}
        )
        assert response.status_code == 422

    def test_customizations_required(self, client, make_template):
        template = make_template(status="published")
        assert client.post(f"/api/templates/{template.slug}/preview", json={}).status_code == 422

    def test_malformed_preview_token(self, client, db_session):
        response = client.get("/api/preview/WzEsMl0")
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "token"


class TestExport:
    def test_export_queues_job(self, client, make_template, db_session):
        template = make_template(status="published")

        response = export(client, template.slug)
        assert response.status_code == 202

        data = response.json()
        assert data["job_id"].startswith("export_")
        assert data["status"] == "queued"
        assert data["download_url"] is None

        job = db_session.query(ExportJob).filter(ExportJob.job_id == data["job_id"]).one()
        assert job.template_id == template.id
        assert job.format == "mp4"
        assert job.quality == "high"
        assert job.layout_snapshot["objects"][0]["content"] == "Happy 30th"

    def test_one_job_per_request(self, client, make_template, db_session):
        template = make_template(status="published")
        ids = {export(client, template.slug).json()["job_id"] for _ in range(3)}
        assert len(ids) == 3
        assert db_session.query(ExportJob).count() == 3

    def test_snapshot_is_frozen(self, client, auth_headers, make_template, db_session):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]

        changed = copy.deepcopy(template.layout)
        changed["objects"][0]["fontSize"] = 99
        client.put(f"/api/admin/templates/{template.id}", json={"layout": changed}, headers=auth_headers)

        db_session.expire_all()
        job = db_session.query(ExportJob).filter(ExportJob.job_id == job_id).one()
        assert job.layout_snapshot["objects"][0]["fontSize"] == 48

    @pytest.mark.parametrize("overrides", [
        {"format": "gif"},
        {"quality": "4k"},
        {"format": None},
    ])
    def test_export_validation(self, client, make_template, overrides):
        template = make_template(status="published")
        assert export(client, template.slug, **overrides).status_code == 422

    def test_export_requires_published(self, client, make_template):
        template = make_template(status="archived")
        assert export(client, template.slug).status_code == 404


class TestExportStatus:
    def test_status_of_new_job(self, client, make_template):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]

        response = client.get(f"/api/export/status/{job_id}")
        assert response.status_code == 200
        assert response.json() == {
            "job_id": job_id,
            "status": "queued",
            "progress": 0,
            "download_url": None,
        }

    def test_unknown_job(self, client, db_session):
        assert client.get("/api/export/status/export_missing").status_code == 404

    def test_job_outlives_deleted_template(self, client, auth_headers, make_template, db_session):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]

        assert client.delete(f"/api/admin/templates/{template.id}", headers=auth_headers).status_code == 200

        db_session.expire_all()
        job = db_session.query(ExportJob).filter(ExportJob.job_id == job_id).one()
        assert job.template_id is None
        assert job.layout_snapshot["objects"][0]["content"] == "Happy 30th"
        assert client.get(f"/api/export/status/{job_id}").json()["status"] == "queued"


class TestRendererCallback:
    def test_lifecycle_to_completed(self, client, make_template, renderer_headers):
        template = make_template(status="published")
        job_id = export(client, template.slug, format="webm").json()["job_id"]
        url = f"/api/export/jobs/{job_id}"

        processing = client.patch(url, json={"status": "processing", "progress": 40}, headers=renderer_headers)
        assert processing.status_code == 200
        assert client.get(f"/api/export/status/{job_id}").json()["progress"] == 40

        completed = client.patch(url, json={"status": "completed"}, headers=renderer_headers)
        assert completed.status_code == 200
        assert completed.json()["completed_at"] is not None

        status = client.get(f"/api/export/status/{job_id}").json()
        assert status["status"] == "completed"
        assert status["progress"] == 100
        assert status["download_url"] == f"/exports/{job_id}.webm"

    def test_failed_is_terminal(self, client, make_template, renderer_headers):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]
        url = f"/api/export/jobs/{job_id}"

        failed = client.patch(url, json={"status": "failed", "error_message": "codec crash"}, headers=renderer_headers)
        assert failed.json()["error_message"] == "codec crash"

        again = client.patch(url, json={"status": "processing"}, headers=renderer_headers)
        assert again.status_code == 400

    def test_cannot_requeue(self, client, make_template, renderer_headers):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]
        response = client.patch(f"/api/export/jobs/{job_id}", json={"status": "queued"}, headers=renderer_headers)
        assert response.status_code == 400

    def test_wrong_token(self, client, make_template, renderer_headers):
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]
        response = client.patch(
            f"/api/export/jobs/{job_id}", json={"status": "processing"}, headers={"X-Renderer-Token": "guess"}
        )
        assert response.status_code == 401

    def test_disabled_without_token_setting(self, client, make_template, monkeypatch):
        monkeypatch.setattr(settings, "RENDERER_CALLBACK_TOKEN", "")
        template = make_template(status="published")
        job_id = export(client, template.slug).json()["job_id"]
        response = client.patch(
            f"/api/export/jobs/{job_id}", json={"status": "processing"}, headers={"X-Renderer-Token": ""}
        )
        assert response.status_code == 404


class TestWeddingEndToEnd:
    def test_category_template_customize(self, client, auth_headers):
        category = client.post("/api/admin/categories", json={"name": "Wedding"}, headers=auth_headers)
        assert category.json()["slug"] == "wedding"

        template = client.post("/api/admin/templates", json={
            "name": "Wedding Card",
            "category": "wedding",
            "status": "draft",
            "layout": {
                "version": "1.0",
                "objects": [{
                    "type": "text", "content": "{{name}}", "fontSize": 48, "color": "#FFF",
                    "fontFamily": "Arial", "textAlign": "center",
                    "x": 0, "y": 0, "width": 100, "height": 50
                }]
            },
        }, headers=auth_headers).json()

        # Drafts are previewable by admins only
        admin_preview = client.post(
            f"/api/admin/templates/{template['id']}/preview",
            json={"customizations": {"text_0": {"content": "Sarah & John"}}},
            headers=auth_headers,
        ).json()
        assert admin_preview["layout"]["objects"][0]["content"] == "Sarah & John"
        assert admin_preview["layout"]["objects"][0]["fontSize"] == 48

        client.post(f"/api/admin/templates/{template['id']}/toggle-status", headers=auth_headers)
        public_preview = client.post(
            f"/api/templates/{template['slug']}/preview",
            json={"customizations": {"text_0": {"content": "Sarah & John"}}},
        ).json()
        assert public_preview["layout"] == admin_preview["layout"]

        assert client.get("/api/categories").json()["categories"][0]["templates_count"] == 1
