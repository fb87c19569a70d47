"""Development entrypoint.

Runs the Flask server with the game cycle in-process. Use a single process:
the cycle and the event stream live in memory.
"""

from keno import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8000, debug=False, threaded=True)
