"""CORS middleware answering preflight requests with an empty body."""

from fastapi import Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """Starlette's CORS middleware, minus the ``OK`` text on preflight answers.

    Feed clients treat any preflight body as content; a successful preflight
    therefore carries the CORS headers only.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)
