"""Development runner.
Usage: python run.py  (reads .env if present; APIBEHAVIOR_* variables configure the policy)
"""

from __future__ import annotations

from dotenv import load_dotenv

from apibehavior import create_app
from apibehavior.middleware import get_options

load_dotenv()

app = create_app()

if __name__ == "__main__":  # pragma: no cover
    import os
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    options = get_options(app)
    app.logger.warning(
        "Serving with compatibility_version=%s problem_details_for_client_errors=%s",
        options.compatibility_version.value,
        options.allow_problem_details_for_client_errors,
    )
    app.run(debug=True, host=host, port=port)
