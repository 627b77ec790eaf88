# Marks `ocie_helper.deps` as a real Python package so imports like
# `from ocie_helper.deps.auth import require_site_access` work reliably.
