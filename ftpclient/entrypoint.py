#!/usr/bin/env python3
"""
Console entry points.

``ftpclient`` runs the interactive shell; ``ftpclient-ui`` starts the
Streamlit front end.
"""

import os
import sys
import logging

from ftpclient.ui import cli

logger = logging.getLogger("ftpclient.entrypoint")

APP_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'ui', 'app.py')


def main():
    sys.exit(cli.main())


def streamlit_command(host: str = '0.0.0.0', port: int = 8501) -> list:
    return [
        'streamlit',
        'run',
        APP_PATH,
        f'--server.port={port}',
        f'--server.address={host}',
        '--logger.level=info',
        '--client.showErrorDetails=true'
    ]


def ui():
    """
    Replaces the current process with ``streamlit run`` on the bundled app.

    ``FTP_UI_HOST`` and ``FTP_UI_PORT`` choose where Streamlit listens.
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    host = os.getenv('FTP_UI_HOST', '0.0.0.0')
    port = int(os.getenv('FTP_UI_PORT', '8501'))
    os.environ['STREAMLIT_TELEMETRY_ENABLED'] = 'false'
    cmd = streamlit_command(host, port)
    logger.info(f"Starting Streamlit FTP client UI on {host}:{port}...")
    try:
        os.execvp(cmd[0], cmd)
    except OSError as e:
        logger.error(f"Failed to exec Streamlit: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
