from __future__ import annotations

import requests

from filemirror.config import Config


def build_session(cfg: Config) -> requests.Session:
    session = requests.Session()
    # Ignore HTTP(S)_PROXY and .netrc from the environment.
    session.trust_env = False
    session.headers.update({"User-Agent": cfg.app.user_agent})
    return session
