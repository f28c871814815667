from exverify.engine import AnyOf, Contains, VerificationModule, hook_rule

MODULE = VerificationModule(
    "react-hooks/04-custom-hooks",
    [
        hook_rule(
            "useCounter",
            required_hooks=["useState"],
            required_returns=["increment", "decrement", "reset"],
            forbidden_stubs=["count: 0"],
        ),
        hook_rule(
            "useToggle",
            required_hooks=["useState"],
            required_returns=["toggle"],
            forbidden_stubs=["[false, () => {}, () => {}, () => {}]"],
        ),
        hook_rule(
            "useLocalStorage",
            required_hooks=["useState"],
            required_returns=["localStorage", "setValue"],
        ),
        hook_rule(
            "useFetch",
            required_hooks=["useState", "useEffect"],
            required_returns=["data", "loading", "error"],
            forbidden_stubs=["data: null,\n    loading: false"],
        ),
        hook_rule(
            "useDebounce",
            required_hooks=["useState", "useEffect"],
            forbidden_stubs=["return value"],
            custom=AnyOf(Contains("setTimeout"), Contains("timeout"), message="useDebounce should debounce with setTimeout"),
        ),
        hook_rule(
            "usePrevious",
            required_hooks=["useRef", "useEffect"],
            forbidden_stubs=["return undefined"],
        ),
    ],
    title="Custom Hooks",
)
