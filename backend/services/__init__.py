from importlib import import_module

__all__ = [
    "split_router",
    "SplitRouter",
    "available_actions",
    "execute_action",
]

# Lazy so importing the optimization engine alone does not load settings.
_LAZY_EXPORTS = {
    "split_router": ("services.split_router", "split_router"),
    "SplitRouter": ("services.split_router", "SplitRouter"),
    "available_actions": ("services.split_actions", "available_actions"),
    "execute_action": ("services.split_actions", "execute_action"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
