'''Common functionality for components.

Functions to build named function registers and retrievers around them.
There should normally be no need to use these functions directly.
'''

from typing import Callable, Dict, Union


def marker(register: Dict[str, Callable],
           name: str,
           ) -> Callable[[Callable], Callable]:
    '''A registration decorator factory.'''
    def mark_function(func):
        register[func.__name__] = func
        return func
    return mark_function


def getter(register: Dict[str, Callable],
           name: str,
           ) -> Callable[[str], Callable]:
    '''A register retriever factory.'''
    def get(func_def: str) -> Callable:
        try:
            return register[func_def]
        except KeyError:
            raise KeyError(f'unknown {name}: {func_def}')
    get.__doc__ = f'Return a {name} function by its name.'
    return get


def constructer(register: Dict[str, Callable],
                name: str,
                ) -> Callable[[Union[str, Callable]], Callable]:
    '''A register implicit retriever/passthrough function factory.'''
    get = getter(register, name)

    def construct(func_def: Union[str, Callable]) -> Callable:
        return func_def if callable(func_def) else get(func_def)

    construct.__doc__ = (
        f'Construct a {name} function.\n\n'
        f'Get a {name} function by its name from the register. If a custom\n'
        'callable is given, pass it through unchanged.'
    )
    return construct


def register_functions(register: Dict[str, Callable], name: str):
    '''Construct the marker, getter and constructer functions at one call.'''
    return (
        marker(register, name),
        getter(register, name),
        constructer(register, name),
    )
