"""Plugin package.

Kept free of concrete plugin imports so ``import namedroutes.plugins`` has no
side effects; ``logging`` self-registers when ``namedroutes`` is imported.
"""

__all__: list[str] = []
