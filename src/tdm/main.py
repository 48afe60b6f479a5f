from __future__ import annotations

from tdm.config import load_settings
from tdm.logging import configure_logging, get_logger


def main() -> int:
    """
    Programmatic entrypoint.

    Recommended dev command:
      uvicorn tdm.api.app:app --reload

    This entrypoint exists so you can also do:
      python -m tdm.main   (or the `tdm` console script)
    """
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    log.info("Starting TDM (priority_order=%s)", settings.priority_order.value)

    # Import here so config/logging are set before app import side-effects.
    try:
        from tdm.api.app import app  # noqa: F401
    except Exception:
        log.exception("Failed to import FastAPI app (tdm.api.app:app).")
        return 1

    import uvicorn

    uvicorn.run(
        "tdm.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,  # prefer `uvicorn ... --reload` in dev
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
