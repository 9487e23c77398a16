from invoke import task

EXAMPLE_CONFIG = "config.example.yaml"


@task
def lint(c):
    c.run("ruff check src tests")


@task
def format_check(c):
    c.run("ruff format --check src tests")


@task(help={"match": "Only run tests whose names match this expression"})
def test(c, match=""):
    c.run(f"pytest -k '{match}'" if match else "pytest")


@task
def check_config(c, path=EXAMPLE_CONFIG):
    c.run(f"keep-trade-cut validate {path}")


@task
def ci(c):
    lint(c)
    format_check(c)
    check_config(c)
    test(c)
