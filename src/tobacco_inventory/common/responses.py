from typing import Union
from urllib.parse import quote

from fastapi import Response


def content_disposition(filename: str) -> str:
    """
    ``Content-Disposition`` value for a download named ``filename``.

    Response headers go out as latin-1, so a name built from station, buyer,
    farmer or driver values is sent twice: as a plain ASCII ``filename`` and,
    when that had to be altered, as the UTF-8 ``filename*`` of RFC 6266.
    """
    fallback = "".join(c if " " <= c <= "~" and c not in '"\\' else "_" for c in filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def attachment(content: Union[bytes, str], filename: str, media_type: str) -> Response:
    """Response that the browser saves as ``filename`` instead of displaying it."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )
