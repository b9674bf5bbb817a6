import os
import subprocess
import sys
import time
import webbrowser
import requests

# === ⚙️ SETTINGS ===
DEFAULT_RETRIES = 20
DEFAULT_DELAY = 1
HOST = "localhost"
PORT = int(os.environ.get("PORT", "3000"))


# === 🧾 LOGGING ===
def log(status: str, message: str, end="\n"):
    icons = {
        "info": "ℹ️ ",
        "success": "✅",
        "error": "❌",
        "action": "🔧",
        "waiting": "⏳",
        "build": "🚀",
    }
    print(f"\r{icons.get(status, '❔')} {message}", end=end, flush=True)


# === 🦄 SERVER ===
def start_server(port: int) -> subprocess.Popen:
    log("build", f"Starting uvicorn on port {port}")
    return subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "main:app",
            "--host",
            "0.0.0.0",
            "--port",
            str(port),
        ],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )


# === ⏳ WAITERS ===
def wait_for_service(
    host: str, port: int, process: subprocess.Popen, retries=DEFAULT_RETRIES, delay=DEFAULT_DELAY
):
    url = f"http://{host}:{port}"
    msg = f"Waiting for {url}"
    log("waiting", msg, end="")

    dots = ""
    for _ in range(retries):
        if process.poll() is not None:
            print()
            log("error", f"Server exited early (exit {process.returncode}).")
            sys.exit(1)
        try:
            if requests.get(url, timeout=2).status_code < 500:
                print("\r" + " " * (len(msg) + len(dots) + 4), end="\r")
                log("success", f"{url} is ready.")
                return url
        except requests.RequestException:
            pass

        dots += "."
        print(f"\r⏳ {msg}{dots}", end="", flush=True)
        time.sleep(delay)

    print()
    log("error", f"Timeout waiting for {url}")
    process.terminate()
    sys.exit(1)


# === 🌐 BROWSER ===
def open_browser(url: str):
    log("action", f"Opening browser at {url}")
    webbrowser.open(url)


# === 🚀 MAIN ===
def main():
    log("info", "=== 🚀 YouTube Search Proxy Bootstrap ===")
    process = start_server(PORT)
    url = wait_for_service(HOST, PORT, process)
    open_browser(url)
    log("success", "🎉 Server running, Ctrl+C to stop.")
    try:
        process.wait()
    except KeyboardInterrupt:
        log("action", "Stopping server...")
        process.terminate()
        process.wait()


if __name__ == "__main__":
    main()
