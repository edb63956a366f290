import os
import subprocess


def run_fastapi():
    """Run the tool API on $PORT (default 8000)."""
    subprocess.run(
        [
            "uvicorn",
            "app.main:app",
            "--host",
            "0.0.0.0",
            "--port",
            str(os.getenv("PORT", "8000")),
            "--proxy-headers",
            "--workers",
            str(os.getenv("UVICORN_WORKERS", 1)),
        ],
        check=True,
    )


if __name__ == "__main__":
    print("[start] launching uvicorn on PORT=", os.getenv("PORT", "8000"), flush=True)
    run_fastapi()
