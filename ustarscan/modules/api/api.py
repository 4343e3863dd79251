import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, HTTPException
from fastapi.responses import Response

from ustarscan.archive import TarArchive
from ustarscan.modules.config import ARCHIVE_ENV_VAR, ScanSettings
from ustarscan.modules.exceptions import (
    NotAFileError,
    OffsetOutOfRangeError,
    SymlinkLoopError,
    TruncatedPayloadError,
)


def create_app(archive_path: Optional[str] = None, settings: Optional[ScanSettings] = None) -> FastAPI:
    """
    Build the API for one archive.

    `archive_path` defaults to the USTARSCAN_ARCHIVE environment variable,
    read when a request arrives. Each request opens its own handle.
    """
    app = FastAPI(
        title="ustarscan API",
        description="""
**ustarscan API**
* Read-only queries against a single USTAR archive
        """,
        version="0.1.0",
    )

    def open_archive() -> TarArchive:
        path = archive_path or os.environ.get(ARCHIVE_ENV_VAR)
        if not path:
            raise HTTPException(status_code=500, detail=f"No archive configured (set {ARCHIVE_ENV_VAR})")
        if not os.path.isfile(path):
            raise HTTPException(status_code=500, detail=f"Archive not found: {path}")
        return TarArchive(name=path, settings=settings)

    def symlink_error(e: SymlinkLoopError) -> HTTPException:
        return HTTPException(status_code=508, detail=str(e))

    @app.get("/check")
    def check():
        """
        ## /check

        Validate every header.

        - `valid` is false when a header has a bad magic (-1), version (-2) or checksum (-3).
        """
        with open_archive() as archive:
            result = archive.check()
        return {"valid": result >= 0, "result": result}

    @app.get("/exists")
    def exists(path: str = Query(..., description="Entry path, e.g. docs/readme.txt")):
        with open_archive() as archive:
            return {"path": path, "exists": archive.exists(path)}

    @app.get("/stat")
    def stat(path: str = Query(..., description="Entry path")):
        """
        ## /stat

        Type flags and header fields of one entry. 404 when absent.
        """
        with open_archive() as archive:
            header = archive.getheader(path)
        if header is None:
            raise HTTPException(status_code=404, detail=f"No entry: {path}")
        info = header.to_dict()
        info.update({
            "is_dir": header.is_dir,
            "is_file": header.is_file,
            "is_symlink": header.is_symlink,
        })
        return info

    @app.get("/list")
    def list_dir(
        path: str = Query(..., description="Directory path; symlinks are followed"),
        capacity: Optional[int] = Query(default=None, ge=0, description="Maximum names returned"),
    ):
        """
        ## /list

        Immediate children of a directory, in archive order.
        """
        try:
            with open_archive() as archive:
                result = archive.list(path, capacity)
        except SymlinkLoopError as e:
            raise symlink_error(e)
        if not result.found:
            raise HTTPException(status_code=404, detail=f"No directory: {path}")
        return result.to_dict()

    @app.get("/read")
    def read(
        path: str = Query(..., description="File path; symlinks are followed"),
        offset: int = Query(default=0, ge=0),
        length: int = Query(default=4096, ge=0, le=16 * 1024 * 1024),
    ):
        """
        ## /read

        One window of a file. `X-Remaining` holds the bytes left past the window.
        """
        buffer = bytearray(length)
        try:
            with open_archive() as archive:
                result = archive.read(path, offset, buffer)
        except NotAFileError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except OffsetOutOfRangeError as e:
            raise HTTPException(status_code=416, detail=str(e))
        except SymlinkLoopError as e:
            raise symlink_error(e)

        return Response(
            content=bytes(buffer[:result.bytes_written]),
            media_type="application/octet-stream",
            headers={"X-Remaining": str(result.remaining)},
        )

    @app.get("/carve")
    def carve(
        path: str = Query(..., description="File path in the archive"),
        as_text: bool = Query(default=False, description="Render as plain text in browser instead of downloading"),
    ):
        """
        ## Carve

        Return a whole file as a browser download.
        """
        try:
            with open_archive() as archive:
                content = archive.read_all(path)
        except NotAFileError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except SymlinkLoopError as e:
            raise symlink_error(e)
        except TruncatedPayloadError as e:
            raise HTTPException(status_code=500, detail=f"Truncated payload: {e}")

        filename = Path(path).name
        headers = {"Content-Length": str(len(content))}

        if as_text:
            headers["Content-Disposition"] = f'inline; filename="{filename}"'
            return Response(content=content, media_type="text/plain; charset=utf-8", headers=headers)

        headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return Response(content=content, media_type="application/octet-stream", headers=headers)

    return app


app = create_app()
