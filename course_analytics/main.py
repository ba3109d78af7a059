from __future__ import annotations

import asyncio
import logging

from course_analytics.config.settings import get_settings
from course_analytics.io.loaders import load_all
from course_analytics.models.schema import Context
from course_analytics.pipelines.build_report import build_report
from course_analytics.pipelines.build_tables import build_tables
from course_analytics.pipelines.engine import run_with_settings

logger = logging.getLogger(__name__)


async def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    data = await load_all(settings.data_dir, settings.export_file)
    ctx = Context(settings=settings, data=data)
    ctx.engine = run_with_settings(data, settings)

    report_path = build_report(ctx)
    if not ctx.engine.ok:
        logger.error("%s", ctx.engine.error)
        return 1

    build_tables(ctx)
    logger.info("Analytics pipeline completed: %s", report_path)
    return 0


def run() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
