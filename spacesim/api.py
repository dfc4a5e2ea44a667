"""HTTP API exposing commodities and solar systems as JSON."""

from __future__ import annotations

import json
import logging
import math
import signal
import threading
from socketserver import ThreadingMixIn
from typing import Any, Callable, Protocol
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from flask import Flask, Response, request

from .commodity import Commodity, CommodityNotFoundError
from .pagination import Pagination, get_pagination
from .solar_system import SolarSystem, SolarSystemNotFoundError

logger = logging.getLogger(__name__)

API = "/api"
V1 = "/v1"

DEFAULT_HOST = ""
DEFAULT_PORT = 8080


def with_path(version: str, path: str) -> str:
    """Join the API prefix, a version and a resource path."""
    return f"{API}{version}{path}"


class CommodityApiService(Protocol):
    """Commodity operations the HTTP layer needs."""

    def find_all_commodity(self, pagination: Pagination) -> list[Commodity]: ...

    def find_commodity(self, commodity_id: str) -> Commodity: ...

    def create_commodity(self, commodity: Commodity) -> Commodity: ...

    def remove_commodity(self, commodity_id: str) -> None: ...


class SolarSystemApiService(Protocol):
    """Solar system operations the HTTP layer needs."""

    def find_all_solar_systems(self, pagination: Pagination) -> list[SolarSystem]: ...

    def find_solar_system(self, solar_system_id: str) -> SolarSystem: ...

    def create_solar_system(self, solar_system: SolarSystem) -> SolarSystem: ...

    def remove_solar_system(self, solar_system_id: str) -> None: ...


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value {name}")


def _decode_object(body: bytes, fields: dict[str, type]) -> dict[str, Any]:
    """Decode the first JSON value of ``body`` into the known ``fields``.

    Keys match field names case-insensitively, unknown keys are ignored and
    ``null`` leaves a field unset. A wrong type raises ValueError.
    """
    text = body.decode("utf-8").lstrip(" \t\r\n")
    decoder = json.JSONDecoder(parse_constant=_reject_constant)
    value, _ = decoder.raw_decode(text)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("expected a JSON object")

    result: dict[str, Any] = {}
    for key, item in value.items():
        name = key if key in fields else next(
            (field for field in fields if field.lower() == key.lower()), None
        )
        if name is None or item is None:
            continue
        expected = fields[name]
        if expected is str:
            if not isinstance(item, str):
                raise ValueError(f"field {name} must be a string")
        elif expected is float:
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                raise ValueError(f"field {name} must be a number")
            item = float(item)
            if not math.isfinite(item):
                raise ValueError(f"field {name} is out of range")
        result[name] = item
    return result


def _status(code: int) -> Response:
    return Response(status=code)


def _json_response(payload: Any, what: str) -> Response:
    try:
        body = json.dumps(payload, allow_nan=False)
    except (TypeError, ValueError) as err:
        logger.info("Error encoding %s %s", what, err)
        return _status(500)
    return Response(body + "\n", status=200, mimetype="application/json")


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


class Handler:
    """Routes HTTP requests to the commodity and solar system services."""

    def __init__(
        self,
        commodity_service: CommodityApiService,
        solar_system_service: SolarSystemApiService,
    ) -> None:
        self.commodity_service = commodity_service
        self.solar_system_service = solar_system_service
        self.app = Flask(__name__)
        self._map_routes()

    def _map_routes(self) -> None:
        routes: list[tuple[str, str, Callable[..., Response]]] = [
            ("/commodities", "GET", self.get_commodities),
            ("/commodities/<id>", "GET", self.get_commodity),
            ("/commodities", "POST", self.post_commodity),
            ("/commodities/<id>", "DELETE", self.delete_commodity),
            ("/solarSystems", "GET", self.get_solar_systems),
            ("/solarSystems/<id>", "GET", self.get_solar_system),
            ("/solarSystems", "POST", self.post_solar_system),
            ("/solarSystems/<id>", "DELETE", self.delete_solar_system),
        ]
        for path, method, view in routes:
            self.app.add_url_rule(
                with_path(V1, path),
                endpoint=view.__name__,
                view_func=view,
                methods=[method],
            )

    # -- commodities ------------------------------------------------------

    def get_commodities(self) -> Response:
        """List one page of commodities."""
        logger.info("REQUEST: GetCommodities")
        pagination = get_pagination(request.args)
        try:
            commodities = self.commodity_service.find_all_commodity(pagination)
        except Exception as err:
            logger.info("Error getting commodities %s", err)
            return _status(500)
        payload = {
            "commodities": None if commodities is None else [c.to_dict() for c in commodities],
            "pagination": pagination.to_dict(),
        }
        return _json_response(payload, "commodities")

    def get_commodity(self, id: str) -> Response:  # noqa: A002
        """Return one commodity by id."""
        logger.info("REQUEST: GetCommodity")
        if not id:
            logger.info("ID was missing from request")
            return _status(400)
        try:
            found = self.commodity_service.find_commodity(id)
        except CommodityNotFoundError as err:
            logger.info("Commodity not found %s", err)
            return _status(404)
        except Exception as err:
            logger.info("Error getting commodity %s", err)
            return _status(500)
        return _json_response(found.to_dict(), "commodity")

    def post_commodity(self) -> Response:
        """Create a commodity from the JSON body."""
        logger.info("REQUEST: PostCommodity")
        try:
            fields = _decode_object(
                request.get_data(),
                {"ID": str, "Name": str, "UnitMass": float, "UnitVolume": float},
            )
        except ValueError as err:
            logger.info("Error decoding commodity %s", err)
            return _status(400)
        commodity = Commodity(
            id=fields.get("ID", ""),
            name=fields.get("Name", ""),
            unit_mass=fields.get("UnitMass", 0.0),
            unit_volume=fields.get("UnitVolume", 0.0),
        )
        try:
            created = self.commodity_service.create_commodity(commodity)
        except Exception as err:
            logger.info("Error creating commodity %s", err)
            return _status(500)
        return _json_response(created.to_dict(), "commodity")

    def delete_commodity(self, id: str) -> Response:  # noqa: A002
        """Delete a commodity by id."""
        logger.info("REQUEST: DeleteCommodity")
        if not id:
            return _status(400)
        try:
            self.commodity_service.remove_commodity(id)
        except Exception as err:
            logger.info("Error deleting commodity %s", err)
            return _status(500)
        return _status(204)

    # -- solar systems ----------------------------------------------------

    def get_solar_systems(self) -> Response:
        """List one page of solar systems."""
        logger.info("REQUEST: GetSolarSystems")
        pagination = get_pagination(request.args)
        try:
            solar_systems = self.solar_system_service.find_all_solar_systems(pagination)
        except Exception as err:
            logger.info("Error getting solar systems %s", err)
            return _status(500)
        payload = {
            "solarSystems": None
            if solar_systems is None
            else [s.to_dict() for s in solar_systems],
            "pagination": pagination.to_dict(),
        }
        return _json_response(payload, "solar systems")

    def get_solar_system(self, id: str) -> Response:  # noqa: A002
        """Return one solar system by id."""
        logger.info("REQUEST: GetSolarSystem")
        if not id:
            logger.info("ID was missing from request")
            return _status(400)
        try:
            found = self.solar_system_service.find_solar_system(id)
        except SolarSystemNotFoundError as err:
            logger.info("Solar system not found %s", err)
            return _status(404)
        except Exception as err:
            logger.info("Error getting solar system %s", err)
            return _status(500)
        return _json_response(found.to_dict(), "solar system")

    def post_solar_system(self) -> Response:
        """Create a solar system from the JSON body."""
        logger.info("REQUEST: PostSolarSystem")
        try:
            fields = _decode_object(request.get_data(), {"ID": str, "Name": str})
        except ValueError as err:
            logger.info("Error decoding solar system %s", err)
            return _status(400)
        solar_system = SolarSystem(id=fields.get("ID", ""), name=fields.get("Name", ""))
        try:
            created = self.solar_system_service.create_solar_system(solar_system)
        except Exception as err:
            logger.info("Error creating solar system %s", err)
            return _status(500)
        return _json_response(created.to_dict(), "solar system")

    def delete_solar_system(self, id: str) -> Response:  # noqa: A002
        """Delete a solar system by id."""
        logger.info("REQUEST: DeleteSolarSystem")
        if not id:
            return _status(400)
        try:
            self.solar_system_service.remove_solar_system(id)
        except Exception as err:
            logger.info("Error deleting solar system %s", err)
            return _status(500)
        return _status(204)

    # -- serving ----------------------------------------------------------

    def serve(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        """Serve requests until the process receives an interrupt, then shut down."""
        stop = threading.Event()
        previous = None
        in_main_thread = threading.current_thread() is threading.main_thread()
        if in_main_thread:
            previous = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())

        try:
            server: WSGIServer | None = None
            try:
                server = make_server(
                    host,
                    port,
                    self.app,
                    server_class=_ThreadingWSGIServer,
                    handler_class=_LoggingRequestHandler,
                )
            except OSError as err:
                logger.info("%s", err)

            if server is not None:
                threading.Thread(target=server.serve_forever, daemon=True).start()

            try:
                while not stop.wait(0.2):
                    pass
            except KeyboardInterrupt:
                pass

            if server is not None:
                server.shutdown()
                server.server_close()
        finally:
            if in_main_thread:
                signal.signal(signal.SIGINT, previous)

        logger.info("Shutting down the server...")