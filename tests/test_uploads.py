import asyncio
from io import BytesIO

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from starlette.datastructures import Headers, UploadFile

from app.main import create_app
from app.services.uploads import PdfUploadGate

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"
UPLOAD_URL = "/api/v1/admin/magazine/upload"


def pdf_file(content=PDF_BYTES, filename="angebote.pdf", content_type="application/pdf"):
    return {"file": (filename, content, content_type)}


def make_upload(content, content_type="application/pdf", size=None):
    return UploadFile(
        file=BytesIO(content),
        size=size,
        filename="angebote.pdf",
        headers=Headers({"content-type": content_type}),
    )


def test_directory_created_at_startup(client, upload_gate):
    assert upload_gate.upload_dir.is_dir()
    assert upload_gate.destination.name == "magazine.pdf"
    assert upload_gate.destination.parent.name == "weekly-discounts"


def test_only_single_slot_policy_is_supported(tmp_path):
    with pytest.raises(ValueError):
        PdfUploadGate(str(tmp_path), slot_policy="versioned")


def test_upload_pdf_and_overwrite(client, upload_gate, admin_headers):
    response = client.post(UPLOAD_URL, files=pdf_file(), headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body == {
        "url": "/api/v1/magazine/current",
        "filename": "magazine.pdf",
        "size": len(PDF_BYTES),
        "mimetype": "application/pdf",
    }
    assert upload_gate.destination.read_bytes() == PDF_BYTES

    newer = PDF_BYTES + b"% KW 43\n"
    response = client.post(UPLOAD_URL, files=pdf_file(newer, filename="kw43.pdf"), headers=admin_headers)
    assert response.status_code == 200
    assert upload_gate.destination.read_bytes() == newer
    # no temp files or extra versions left behind
    assert [p.name for p in upload_gate.upload_dir.iterdir()] == ["magazine.pdf"]


def test_non_pdf_is_rejected_without_touching_storage(client, upload_gate, admin_headers):
    response = client.post(
        UPLOAD_URL,
        files=pdf_file(b"\x89PNG\r\n", filename="bild.png", content_type="image/png"),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Nur PDF-Dateien sind erlaubt"
    assert list(upload_gate.upload_dir.iterdir()) == []


def test_missing_file_field(client, admin_headers):
    response = client.post(UPLOAD_URL, data={"note": "x"}, headers=admin_headers)
    assert response.status_code == 400


def test_upload_requires_admin(client):
    response = client.post(UPLOAD_URL, files=pdf_file())
    assert response.status_code == 401


def test_too_large_upload_keeps_previous_file(session_factory, tmp_path, superadmin, admin_headers):
    gate = PdfUploadGate(str(tmp_path / "uploads"), max_file_size=len(PDF_BYTES))
    app = create_app(session_factory=session_factory, upload_gate=gate)
    with TestClient(app) as client:
        assert client.post(UPLOAD_URL, files=pdf_file(), headers=admin_headers).status_code == 200

        response = client.post(UPLOAD_URL, files=pdf_file(PDF_BYTES * 2), headers=admin_headers)
        assert response.status_code == 413

    assert gate.destination.read_bytes() == PDF_BYTES


def test_content_length_header_check(tmp_path):
    gate = PdfUploadGate(str(tmp_path), max_file_size=1024)
    gate.check_content_length("2048")

    with pytest.raises(HTTPException) as exc:
        gate.check_content_length(None)
    assert exc.value.status_code == 411

    with pytest.raises(HTTPException) as exc:
        gate.check_content_length(str(10 * 1024 * 1024))
    assert exc.value.status_code == 413

    with pytest.raises(HTTPException) as exc:
        gate.check_content_length("viel")
    assert exc.value.status_code == 400


def test_stream_is_capped_when_size_is_unknown(tmp_path):
    gate = PdfUploadGate(str(tmp_path), max_file_size=8)
    gate.ensure_directory()
    gate.destination.write_bytes(b"%PDF-alt")

    with pytest.raises(HTTPException) as exc:
        asyncio.run(gate.accept_upload(make_upload(PDF_BYTES)))
    assert exc.value.status_code == 413
    assert gate.destination.read_bytes() == b"%PDF-alt"
    assert [p.name for p in gate.upload_dir.iterdir()] == ["magazine.pdf"]


def test_accept_upload_directly(tmp_path):
    gate = PdfUploadGate(str(tmp_path))
    stored = asyncio.run(gate.accept_upload(make_upload(PDF_BYTES, size=len(PDF_BYTES))))

    assert stored.size == len(PDF_BYTES)
    assert stored.path == str(gate.destination)
    assert gate.current_file() == gate.destination


def test_current_magazine_endpoint(client, admin_headers):
    assert client.get("/api/v1/magazine/current").status_code == 404

    client.post(UPLOAD_URL, files=pdf_file(), headers=admin_headers)
    response = client.get("/api/v1/magazine/current")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content == PDF_BYTES


BOUNDARY = "magazin-grenze"


def multipart_body(content):
    return (
        f"--{BOUNDARY}\r\n"
        'Content-Disposition: form-data; name="file"; filename="angebote.pdf"\r\n'
        "Content-Type: application/pdf\r\n\r\n"
    ).encode() + content + f"\r\n--{BOUNDARY}--\r\n".encode()


@pytest.fixture()
def small_gate_client(session_factory, tmp_path, monkeypatch):
    """app whose gate allows 1 KiB and records every file that reaches validation."""
    gate = PdfUploadGate(str(tmp_path / "uploads"), max_file_size=1024)
    seen = []
    validate = gate.validate_pdf_file

    def recording_validate(file):
        seen.append(file.size)
        validate(file)

    monkeypatch.setattr(gate, "validate_pdf_file", recording_validate)
    app = create_app(session_factory=session_factory, upload_gate=gate)
    with TestClient(app) as client:
        yield client, gate, seen


def test_chunked_upload_is_refused_before_parsing(small_gate_client, admin_headers):
    client, gate, seen = small_gate_client
    body = multipart_body(b"%PDF-" + b"0" * (5 * 1024 * 1024))

    def chunks():
        for i in range(0, len(body), 64 * 1024):
            yield body[i:i + 64 * 1024]

    response = client.post(
        UPLOAD_URL,
        content=chunks(),
        headers={**admin_headers, "Content-Type": f"multipart/form-data; boundary={BOUNDARY}"},
    )

    assert response.status_code == 411
    assert seen == []
    assert gate.current_file() is None


def test_oversized_content_length_is_refused_before_parsing(small_gate_client, admin_headers):
    client, gate, seen = small_gate_client

    response = client.post(
        UPLOAD_URL,
        files=pdf_file(b"%PDF-" + b"0" * (200 * 1024)),
        headers=admin_headers,
    )

    assert response.status_code == 413
    assert seen == []
    assert gate.current_file() is None
