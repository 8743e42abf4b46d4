"""
Front ends for the FTP client: the interactive shell and the Streamlit app.
"""
