"""
Dice Config Startup Script.

Starts the FastAPI backend, waits until it answers its liveness probe,
then starts the Streamlit frontend.
Run with: python start.py
"""

import os
import sys
import time
import signal
import subprocess
from pathlib import Path

import requests

# Configuration
BACKEND_HOST = os.getenv("API_HOST", "127.0.0.1")
BACKEND_PORT = int(os.getenv("API_PORT", "8000"))
FRONTEND_PORT = int(os.getenv("FRONTEND_PORT", "8501"))
STORAGE_DIR = os.getenv("STORAGE_DIR", "./data/storage")

PROJECT_ROOT = Path(__file__).parent
processes = []


def _spawn(name: str, cmd: list, env: dict = None) -> subprocess.Popen:
    process = subprocess.Popen(
        cmd,
        cwd=str(PROJECT_ROOT),
        env=env,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )
    processes.append((name, process))
    return process


def start_backend() -> subprocess.Popen:
    """Start FastAPI backend."""
    print(f"[BACKEND] Starting on http://{BACKEND_HOST}:{BACKEND_PORT}")
    cmd = [
        sys.executable, "-m", "uvicorn",
        "backend.main:app",
        "--host", BACKEND_HOST,
        "--port", str(BACKEND_PORT),
        "--reload" if os.getenv("DEBUG") else "--no-access-log",
    ]
    return _spawn("backend", cmd)


def start_frontend() -> subprocess.Popen:
    """Start Streamlit frontend pointed at the backend and the shared store directory."""
    print(f"[FRONTEND] Starting on http://localhost:{FRONTEND_PORT}")
    env = dict(os.environ)
    env.setdefault("API_BASE_URL", f"http://{BACKEND_HOST}:{BACKEND_PORT}")
    env.setdefault("STORAGE_DIR", STORAGE_DIR)

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        "frontend/app.py",
        "--server.port", str(FRONTEND_PORT),
        "--server.headless", "true",
    ]
    return _spawn("frontend", cmd, env=env)


def wait_for_backend(timeout: float = 30) -> bool:
    """Poll the liveness endpoint until it answers or timeout elapses."""
    url = f"http://{BACKEND_HOST}:{BACKEND_PORT}/api/v1/health/live"
    deadline = time.time() + timeout

    while time.time() < deadline:
        try:
            if requests.get(url, timeout=2).status_code == 200:
                print("[BACKEND] Ready!")
                return True
        except requests.exceptions.RequestException:
            pass
        time.sleep(0.5)

    print("[BACKEND] Failed to start within timeout")
    return False


def cleanup(signum=None, frame=None):
    """Terminate child processes in reverse start order."""
    print("\n[SHUTDOWN] Stopping all services...")

    for name, process in reversed(processes):
        if process.poll() is None:
            print(f"[SHUTDOWN] Stopping {name}...")
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()

    print("[SHUTDOWN] Done")
    sys.exit(0)


def main():
    signal.signal(signal.SIGINT, cleanup)
    signal.signal(signal.SIGTERM, cleanup)

    Path(STORAGE_DIR).mkdir(parents=True, exist_ok=True)

    print("=" * 50)
    print("Dice Config - Starting Services")
    print("=" * 50)

    start_backend()
    if not wait_for_backend():
        print("[ERROR] Backend failed to start. Check logs above.")
        cleanup()
        return

    start_frontend()

    print("=" * 50)
    print(f"Backend:  http://{BACKEND_HOST}:{BACKEND_PORT}/docs")
    print(f"Frontend: http://localhost:{FRONTEND_PORT}")
    print(f"Shared configuration store: {Path(STORAGE_DIR).resolve()}")
    print("Press Ctrl+C to stop")
    print("=" * 50)

    try:
        while True:
            for name, process in processes:
                if process.poll() is not None:
                    print(f"[ERROR] {name} exited with code {process.returncode}")
                    cleanup()
                    return
            time.sleep(1)
    except KeyboardInterrupt:
        cleanup()


if __name__ == "__main__":
    main()
