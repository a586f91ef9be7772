# build.py
import os
import sys

import PyInstaller.__main__

sys.setrecursionlimit(5000)

SOURCES = [
    "app.py", "views.py", "database.py", "config.py", "navigation.py",
    "inventory.py", "assignment.py", "history.py", "actions.py",
]

if __name__ == '__main__':
    PyInstaller.__main__.run([
        'run_app.py',
        '--name=Equip_Track',
        '--onefile',
        '--clean',

        *[f'--add-data={src}{os.pathsep}.' for src in SOURCES],

        '--collect-all=streamlit',
        '--collect-all=altair',
        '--collect-all=pandas',
        '--collect-all=plotly',
        '--collect-all=qrcode',
        '--collect-all=PIL',
        '--collect-all=fpdf',

        # Streamlit reads these at startup
        '--copy-metadata=streamlit',
        '--copy-metadata=tqdm',
        '--copy-metadata=requests',
        '--copy-metadata=packaging',

        '--exclude-module=pytest',
    ])
