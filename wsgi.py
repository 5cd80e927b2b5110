# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 127.0.0.1:5000
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── pos_ledger/      <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
#
# La configuración se lee del entorno (POS_DATA_DIR, POS_SECRET_KEY, ...).
# ==============================================================================

from pos_ledger.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'], host=app.config['HOST'], port=app.config['PORT'])
