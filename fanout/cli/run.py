from typing import Optional, TextIO

from fanout.infra import CommandTemplate, DispatchEngine, create_logger, read_inputs
from fanout.infra.config import RunConfig


EXIT_OK = 0
EXIT_INTERRUPTED = 130


def cmd_run(config: RunConfig, stdin: Optional[TextIO] = None) -> int:
    """Read all inputs, dispatch them, and wait. Child failures don't change the exit status."""
    with create_logger(config).open() as logger:
        logger.debug(f"selected {config.workers} threads", workers=config.workers)
        logger.debug(f"command: {config.command_template}", command=config.command_template)

        template = CommandTemplate(config.command_template)

        if config.reads_stdin:
            logger.debug("no file specified, will use stdin")
        else:
            logger.debug(f"will read inputs from file {config.input_source.path}")

        inputs = read_inputs(config.input_source, stdin=stdin)
        logger.info(f"got input with {len(inputs)} lines", total=len(inputs))

        engine = DispatchEngine(max_workers=config.workers, logger=logger)
        try:
            engine.run(inputs, template)
        except KeyboardInterrupt:
            logger.warning(
                f"stopped after {engine.stats['processed']}/{len(inputs)} inputs",
                processed=engine.stats["processed"],
                total=len(inputs),
            )
            return EXIT_INTERRUPTED

    return EXIT_OK
