"""Normalisation of user-supplied links."""

from urllib.parse import parse_qs, urlsplit

_FTP_VIEW_QUERY = "/api/ftp/view?filePath="
_FTP_VIEW_PATH = "/api/ftp/view/"


def _uploads_path(path: str) -> str:
    path = path.removeprefix("/uploads/").lstrip("/")
    return f"/uploads/{path}"


def standardize_proof_url(url: str | None) -> str:
    """Map the various file-store URL shapes of a payment proof to /uploads/<path>.

    External http(s) URLs are returned unchanged.
    """
    if not url:
        return ""
    if url.startswith(("https://", "http://")):
        return url

    if _FTP_VIEW_QUERY in url:
        query = parse_qs(urlsplit(url).query)
        file_path = query.get("filePath", [""])[0]
        if file_path:
            return _uploads_path(file_path)
        return url

    if url.startswith(_FTP_VIEW_PATH):
        return _uploads_path(url.removeprefix(_FTP_VIEW_PATH))

    if url.startswith("/uploads/"):
        return url.replace("/uploads/uploads/", "/uploads/")

    return url


def normalize_meeting_link(link: str | None) -> str | None:
    """Ensure a meeting link carries an https scheme. Blank links become None."""
    if link is None:
        return None
    link = link.strip()
    if not link:
        return None
    if link.startswith(("https://", "http://")):
        return link
    return f"https://{link}"
