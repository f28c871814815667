"""Custom hooks: useCounter, useToggle, useLocalStorage, useFetch, useDebounce, usePrevious."""
