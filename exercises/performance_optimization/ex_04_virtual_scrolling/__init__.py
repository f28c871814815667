"""Virtual scrolling: useVirtualScroll, VirtualList."""
