from matrix_build.utils import Logger


def test_levels_and_raw_lines(capsys):
    logger = Logger(name="matrix_build.logger_test")

    logger.debug("hidden")
    logger.success("built linux/x86_64/static")
    logger.raw("  linux/x86_64/static/libyogacore.a")

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "[SUCCESS] built linux/x86_64/static",
        "  linux/x86_64/static/libyogacore.a",
    ]


def test_verbose_shows_debug(capsys):
    logger = Logger(verbose=True, name="matrix_build.logger_test")

    logger.debug("probing ninja")

    assert "[DEBUG] probing ninja" in capsys.readouterr().out
