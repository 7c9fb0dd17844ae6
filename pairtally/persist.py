'''Serialization of pairtally objects to JSON-ready dictionaries.

Evaluators, validators, candidates and results can be converted to plain
dictionaries with :func:`to_dict` and reconstructed with :func:`from_dict`.
Classes opt in with the :func:`simple_serialization` decorator.
'''

import sys
import inspect
import builtins
import importlib
from typing import Any, List, Dict


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method serializes all object attributes named like the
    class's constructor parameters (or listed in its ``serialize_params``
    attribute). Therefore, the class must store its parameters unchanged,
    or in any other form its constructor accepts.

    :param class_: The class to add the method to.
    '''
    if hasattr(class_, 'serialize_params'):
        param_names = list(class_.serialize_params)
    else:
        param_names = [
            name for name, param
            in inspect.signature(class_.__init__).parameters.items()
            if name != 'self' and param.kind not in (
                inspect.Parameter.VAR_POSITIONAL,
                inspect.Parameter.VAR_KEYWORD,
            )
        ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in SEQUENCE_TYPES:
        return {
            'type': type(value).__name__,
            'value': [serialize_value(item) for item in value],
        }
    elif isinstance(value, dict):
        if all(isinstance(key, str) for key in value.keys()):
            return {key: serialize_value(val) for key, val in value.items()}
        else:
            # tally matrices are keyed by candidate id pairs
            return {
                'type': 'dict',
                'keys': [serialize_value(key) for key in value.keys()],
                'values': [serialize_value(val) for val in value.values()],
            }
    elif isinstance(value, list):
        return [serialize_value(item) for item in value]
    elif callable(value):
        return {'callable': '.'.join((value.__module__, value.__name__))}
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'type' in value and is_scoped_identifier(value['type']):
            return deserialize_typed(value)
        elif 'class' in value and is_scoped_identifier(value['class']):
            return deserialize_class(value)
        elif 'callable' in value and is_scoped_identifier(value['callable']):
            return get_object(value['callable'])
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(item) for item in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typeobj = get_object(typedef['type'])
    if typeobj is dict:
        return dict(zip(
            [deserialize_value(key) for key in typedef['keys']],
            [deserialize_value(val) for val in typedef['values']]
        ))
    elif 'value' in typedef:
        return typeobj(deserialize_value(item) for item in typedef['value'])
    else:
        raise ValueError(f'invalid typed value contents: {typedef!r}')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_object(clsdef['class'])
    params = {
        key: val for key, val in clsdef.items() if key != 'class'
    }
    if hasattr(cls, 'from_dict'):
        return cls.from_dict(params)
    else:
        return cls(**{
            key: deserialize_value(val) for key, val in params.items()
        })


def get_object(identifier: str) -> Any:
    if '.' not in identifier:
        return getattr(builtins, identifier)
    module, name = identifier.rsplit('.', 1)
    if module not in sys.modules:
        importlib.import_module(module)
    return getattr(sys.modules[module], name)


def from_dict(value: Dict[str, Any]) -> Any:
    """Reconstruct a pairtally object from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    :raises ValueError: If the dictionary does not describe a class.
    """
    if not isinstance(value, dict):
        raise ValueError(
            f'invalid pairtally object def: dict expected, got {value!r}'
        )
    elif 'class' not in value:
        raise ValueError('invalid pairtally object def: must have a class key')
    elif not is_scoped_identifier(value['class']):
        raise ValueError(f"invalid pairtally class def: {value['class']}")
    else:
        return deserialize_value(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a pairtally object to a JSON-ready dictionary.

    :param obj: An object providing a `to_dict()` method; evaluators,
        validators, candidates and ballot entries get one from the
        :func:`simple_serialization` decorator.
    """
    return serialize_value(obj)


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))


ATOMIC_TYPES: List[type] = [
    str, int, float, bool, type(None),
]

SEQUENCE_TYPES: List[type] = [tuple, frozenset]
