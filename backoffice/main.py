# -*- coding: utf-8 -*-
import os

from backoffice.factory import create_app

# gunicorn entrypoint: gunicorn backoffice.main:app
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "3000")))
