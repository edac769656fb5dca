""" Invoke tasks. """
import io
import shutil
import sys
from pathlib import Path

from invoke.tasks import task

if isinstance(sys.stdout, io.TextIOWrapper):
    sys.stdout.reconfigure(encoding='utf-8')

ROOT = Path(__file__).resolve().parent


@task
def install(c):
    c.run("pip install -e .[test]")


@task
def api(c, host="127.0.0.1", port=8001, seed=None):
    """Serve the planning API; `--seed` overrides SEED_PATH for this run."""
    env = {"PYTHONUTF8": "1"}
    if seed:
        env["SEED_PATH"] = seed
    c.run(f"uvicorn main:app --reload --host {host} --port {port}", env=env)


@task
def test(c, k=None):
    """Run the test suite; `-k` narrows it like pytest's own flag."""
    selector = f" -k {k}" if k else ""
    c.run(f"pytest tests{selector}", pty=sys.platform != "win32")


@task
def clean(c):
    """Remove bytecode caches, pytest cache and the run log."""
    for cache in ROOT.rglob("__pycache__"):
        shutil.rmtree(cache, ignore_errors=True)
    shutil.rmtree(ROOT / ".pytest_cache", ignore_errors=True)
    (ROOT / "planning_run.log").unlink(missing_ok=True)
