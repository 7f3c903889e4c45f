"""Project root entry point for launching the job API."""

from __future__ import annotations

from localeweave.logger import set_log_mode


def main():
    from localeweave.web import create_app

    set_log_mode("info")
    app = create_app()
    app.run(host="127.0.0.1", port=5500, debug=False)


if __name__ == "__main__":
    main()
