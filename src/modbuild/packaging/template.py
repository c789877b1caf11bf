"""Runtime loader template wrapped around every compiled bundle."""

from __future__ import annotations

from string import Template

__all__ = ["LOADER_TEMPLATE", "render_loader"]

LOADER_TEMPLATE = Template(
    """(function(global) {
    global.__module_${module_id} = {
        init: function(context, deps) {
            var module = { exports: {} };
            var exports = module.exports;

            var React = deps.React;
            var ReactDOM = deps.ReactDOM;
            var useState = React.useState;
            var useEffect = React.useEffect;
            var useCallback = React.useCallback;
            var useMemo = React.useMemo;
            var useRef = React.useRef;
            var useContext = React.useContext;
            var useReducer = React.useReducer;
            var createElement = React.createElement;
            var Fragment = React.Fragment;

            ${polyfill}

            (function(React, ReactDOM, require, module, exports) {
                ${code}
            })(React, ReactDOM, deps.require, module, exports);

            var factory = null;
            var exported = module.exports;
            if (typeof exported === 'function') {
                factory = exported;
            } else if (exported && typeof exported === 'object') {
                if (typeof exported['default'] === 'function') {
                    factory = exported['default'];
                } else {
                    for (var key in exported) {
                        if (key !== '__esModule' && typeof exported[key] === 'function') {
                            factory = exported[key];
                            break;
                        }
                    }
                }
            }

            if (!factory) {
                throw new Error('No valid factory function found in module exports');
            }

            var result = factory(context);
            if (!result || typeof result !== 'object') {
                throw new Error('Factory must return an object, got: ' + typeof result);
            }
            if (typeof result.Component !== 'function') {
                throw new Error('Factory result must expose a Component function, got: ' + typeof result.Component);
            }
            return result;
        }
    };
})(typeof window !== 'undefined' ? window : globalThis);
"""
)


def render_loader(module_id: int, polyfill: str, code: str) -> str:
    """Substitute the module id, polyfill and compiled code into the loader."""
    return LOADER_TEMPLATE.substitute(module_id=module_id, polyfill=polyfill, code=code)
