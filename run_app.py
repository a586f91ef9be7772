# run_app.py
import os
import sys

import streamlit.web.cli as stcli


def resolve_path(path):
    if getattr(sys, "frozen", False):
        basedir = sys._MEIPASS
    else:
        basedir = os.path.dirname(__file__)
    return os.path.join(basedir, path)


def main():
    # Bundled builds have no browser to open from the server side
    os.environ["STREAMLIT_SERVER_HEADLESS"] = "true"
    sys.argv = [
        "streamlit",
        "run",
        resolve_path("app.py"),
        "--global.developmentMode=false",
    ]
    return stcli.main()


if __name__ == "__main__":
    sys.exit(main())
