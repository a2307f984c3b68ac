import sys
import threading
import webbrowser

import uvicorn

HOST = "127.0.0.1"
PORT = 8000


def main():
    open_docs = "--no-browser" not in sys.argv[1:]
    print(f"Starting Recall on http://{HOST}:{PORT}")

    if open_docs:
        # Give the server a moment before pointing the browser at the API docs
        threading.Timer(2.0, webbrowser.open, args=(f"http://{HOST}:{PORT}/docs",)).start()

    try:
        uvicorn.run("recall.main:app", host=HOST, port=PORT)
    except KeyboardInterrupt:
        print("\nStopping...")


if __name__ == "__main__":
    main()
