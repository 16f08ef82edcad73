"""内置绑定器."""

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.binders.client_auth import ClientAuthBinder
from reqbind.binding.binders.form import FormBinder
from reqbind.binding.binders.json_body import JSONBinder
from reqbind.binding.binders.path import PathBinder, view_args_lookup
from reqbind.binding.binders.query import QueryBinder

__all__ = [
    "Binder",
    "BinderKind",
    "ClientAuthBinder",
    "FormBinder",
    "JSONBinder",
    "PathBinder",
    "QueryBinder",
    "view_args_lookup",
]
