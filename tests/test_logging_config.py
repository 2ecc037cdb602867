import io
import logging

from fuzzytunes.logging_config import (
    LEVEL_COLORS,
    RESET,
    LevelColorFormatter,
    get_logger,
    setup_logging,
)


class TTYStream(io.StringIO):
    def isatty(self):
        return True


class TestSetupLogging:

    def teardown_method(self):
        package_logger = logging.getLogger("fuzzytunes")
        for handler in package_logger.handlers:
            handler.close()
        package_logger.handlers.clear()
        package_logger.propagate = True
        package_logger.setLevel(logging.NOTSET)

    def test_console_only(self):
        stream = io.StringIO()

        package_logger = setup_logging("info", stream=stream)
        get_logger("client").debug("hidden")
        get_logger("client").info("shown")

        assert package_logger.name == "fuzzytunes"
        assert len(package_logger.handlers) == 1
        assert not package_logger.propagate
        assert stream.getvalue() == "INFO: shown\n"

    def test_plain_when_not_a_tty(self):
        stream = io.StringIO()

        setup_logging("WARNING", stream=stream)
        get_logger("config").warning("bad key")

        assert "\033[" not in stream.getvalue()

    def test_colored_on_a_tty(self):
        stream = TTYStream()

        setup_logging("WARNING", stream=stream)
        get_logger("config").warning("bad key")

        assert stream.getvalue() == f"{LEVEL_COLORS[logging.WARNING]}WARNING{RESET}: bad key\n"

    def test_log_file_gets_debug(self, tmp_path):
        log_file = tmp_path / "fuzzytunes.log"
        stream = io.StringIO()

        package_logger = setup_logging("WARNING", log_file=log_file, stream=stream)
        get_logger("navigator").debug("entering view")
        for handler in package_logger.handlers:
            handler.flush()

        assert len(package_logger.handlers) == 2
        assert stream.getvalue() == ""
        assert "fuzzytunes.navigator" in log_file.read_text()
        assert "entering view" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging("WARNING", stream=io.StringIO())
        package_logger = setup_logging("WARNING", stream=io.StringIO())

        assert len(package_logger.handlers) == 1


class TestLevelColorFormatter:

    def test_record_left_uncolored(self):
        record = logging.makeLogRecord({"levelno": logging.ERROR, "levelname": "ERROR", "msg": "x"})

        text = LevelColorFormatter("%(levelname)s: %(message)s").format(record)

        assert text == f"{LEVEL_COLORS[logging.ERROR]}ERROR{RESET}: x"
        assert record.levelname == "ERROR"


class TestGetLogger:

    def test_named_under_package(self):
        assert get_logger("selector").name == "fuzzytunes.selector"
