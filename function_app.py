
import os
import logging
import azure.functions as func

from src.function_blueprints.watermark_blueprint import bp as watermark_bp

app = func.FunctionApp()


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
    app_lvl = (os.getenv("WATERMARK_LOG_LEVEL") or "INFO").upper()
    logging.getLogger("watermark_hook").setLevel(getattr(logging, app_lvl, logging.INFO))


_configure_logging()
app.register_functions(watermark_bp)
