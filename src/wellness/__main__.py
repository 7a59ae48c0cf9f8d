"""
Main entrypoint.

Usage:
    python -m wellness                          # serve the API under uvicorn
    python -m wellness dashboard <owner_id>     # print the dashboard JSON
    python -m wellness refresh-profile <owner_id>  # force circadian regeneration
"""
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _build_service():
    from wellness.ai.emotion_classifier import build_classifier
    from wellness.config import get_settings
    from wellness.db.engine import get_engine
    from wellness.services.wellness_service import WellnessService

    settings = get_settings()
    return WellnessService(get_engine(), settings=settings, classify=build_classifier(settings))


def _print_dashboard(owner_id: str) -> None:
    from wellness.services.dashboard import compose_dashboard

    print(json.dumps(compose_dashboard(_build_service(), owner_id), indent=2))


def _refresh_profile(owner_id: str) -> None:
    profile = _build_service().get_circadian_profile(owner_id, force=True)
    if profile.is_default:
        logger.info("Not enough history for %s, default profile returned.", owner_id)
    print(json.dumps(profile.to_dict(), indent=2))


def _serve() -> None:
    import uvicorn

    from wellness.config import get_settings

    settings = get_settings()
    logger.info("Starting API on %s:%d", settings.api_host, settings.api_port)
    uvicorn.run("wellness.api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    # Dispatch on first argument; no argument starts the API
    command = sys.argv[1] if len(sys.argv) > 1 else None
    if command in ("dashboard", "refresh-profile"):
        if len(sys.argv) < 3:
            logger.error("Usage: python -m wellness %s <owner_id>", command)
            sys.exit(2)
        if command == "dashboard":
            _print_dashboard(sys.argv[2])
        else:
            _refresh_profile(sys.argv[2])
    elif command is None:
        _serve()
    else:
        logger.error("Unknown command %r", command)
        sys.exit(2)
