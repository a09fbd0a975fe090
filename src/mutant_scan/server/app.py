"""Starlette ASGI application exposing classification and stats."""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.schemas import SchemaGenerator

from .. import __version__
from ..exceptions import DetectionError, PersistenceError, ValidationError
from ..service import ClassifierService
from ..stats import StatsAggregator
from .serializers import RequestError, classification_error_body, error_body, parse_dna_request

logger = logging.getLogger(__name__)

schemas = SchemaGenerator(
    {
        "openapi": "3.0.0",
        "info": {
            "title": "Mutant Detector API",
            "version": __version__,
            "description": (
                "Classifies N x N DNA grids over A, T, C, G as mutant or human by "
                "looking for repeated runs of four horizontally, vertically and diagonally."
            ),
        },
    }
)


def create_app(service: ClassifierService, stats: StatsAggregator) -> Starlette:
    """Build the Starlette application wired to *service* and *stats*.

    Routes:
        POST /api/mutant  200 for mutant, 403 for human, 400 for bad input
        GET  /api/stats   mutant/human counts and ratio
        GET  /api/health  liveness probe
        GET  /api/openapi.json  OpenAPI description built from handler docstrings
    """

    async def mutant(request: Request) -> JSONResponse:
        """
        ---
        summary: Detect whether a DNA grid belongs to a mutant
        description: >
          Takes an N x N grid of A, T, C and G. The grid is mutant when more
          than one run of four identical bases is found.
        requestBody:
          required: true
          content:
            application/json:
              schema:
                type: object
                required: [dna]
                properties:
                  dna:
                    type: array
                    items: {type: string}
        responses:
          "200":
            description: The DNA is mutant
          "403":
            description: The DNA is human
          "400":
            description: Invalid DNA, wrong shape or symbols outside A, T, C, G
        """
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(error_body(400, "Request body must be valid JSON"), status_code=400)

        try:
            rows = parse_dna_request(payload)
        except RequestError as exc:
            return JSONResponse(error_body(400, exc.message), status_code=400)

        try:
            result = await run_in_threadpool(service.classify, rows)
        except ValidationError as exc:
            logger.debug("Rejected grid: %s", exc)
            return JSONResponse(classification_error_body(400, exc), status_code=400)
        except DetectionError as exc:
            logger.error("Detection failed: %s", exc)
            return JSONResponse(classification_error_body(500, exc), status_code=500)

        return JSONResponse({"is_mutant": result}, status_code=200 if result else 403)

    async def api_stats(request: Request) -> JSONResponse:
        """
        ---
        summary: Global mutant and human counts
        responses:
          "200":
            description: Counts and their ratio
            content:
              application/json:
                example: {count_mutant_dna: 40, count_human_dna: 100, ratio: 0.4}
          "503":
            description: Record store unavailable
        """
        try:
            snapshot = await run_in_threadpool(stats.snapshot)
        except PersistenceError as exc:
            logger.warning("Stats unavailable: %s", exc)
            return JSONResponse(classification_error_body(503, exc), status_code=503)
        return JSONResponse(snapshot.to_dict())

    async def health(request: Request) -> JSONResponse:
        """
        ---
        summary: Liveness check
        responses:
          "200":
            description: Service is up
        """
        return JSONResponse({"status": "ok", "version": __version__})

    async def openapi(request: Request) -> JSONResponse:
        return JSONResponse(schemas.get_schema(routes=routes))

    routes = [
        Route("/api/mutant", mutant, methods=["POST"]),
        Route("/api/stats", api_stats, methods=["GET"]),
        Route("/api/health", health, methods=["GET"]),
        Route("/api/openapi.json", openapi, methods=["GET"], include_in_schema=False),
    ]

    return Starlette(routes=routes)
