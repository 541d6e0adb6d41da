import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

TEST_LAYERS = ("domain", "application", "integration", "bdd")


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the full reviews test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/reviews/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize("layer", TEST_LAYERS)
def tests_layer(session: nox.Session, layer: str) -> None:
    """Run one test layer, e.g. ``nox -s "tests_layer(layer='bdd')"``."""
    _install(session)
    session.run("pytest", f"tests/reviews/{layer}/", *session.posargs)
