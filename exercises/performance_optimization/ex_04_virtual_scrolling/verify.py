from exverify.engine import (
    Absent,
    AllOf,
    Contains,
    DeclarationKind,
    MinLength,
    PredicateRule,
    Subject,
    VerificationModule,
)


def _range_checks(owner: str) -> list:
    return [
        Contains("startIndex", message=f"{owner} should calculate startIndex for visible range"),
        Contains("endIndex", message=f"{owner} should calculate endIndex for visible range"),
    ]


def build_module() -> VerificationModule:
    virtual_scroll = Subject.of("useVirtualScroll", DeclarationKind.CONSTANT)
    virtual_list = Subject.of("VirtualList")
    return VerificationModule(
        "performance-optimization/04-virtual-scrolling",
        [
            PredicateRule(
                name="useVirtualScroll hook efficiently calculates visible ranges",
                subject=virtual_scroll,
                condition=AllOf(
                    *_range_checks("useVirtualScroll"),
                    Contains("Math.floor", message="useVirtualScroll should use Math.floor for start index calculation"),
                    Contains("Math.ceil", message="useVirtualScroll should use Math.ceil for end index calculation"),
                    Contains("scrollTop", message="useVirtualScroll should track scrollTop position"),
                    Contains("overscan", message="useVirtualScroll should implement overscan for smooth scrolling"),
                    Absent("TODO", message="useVirtualScroll still contains TODO comments - needs implementation"),
                    MinLength(200),
                ),
                message="useVirtualScroll needs substantial implementation with range calculations",
            ),
            PredicateRule(
                name="VirtualList renders only visible items with proper positioning",
                subject=virtual_list,
                condition=AllOf(
                    Contains("useVirtualScroll", message="VirtualList should use useVirtualScroll hook"),
                    Contains("slice", message="VirtualList should slice items array for visible range"),
                    Contains("onScroll", message="VirtualList should handle scroll events"),
                    Contains("position: 'absolute'", message="VirtualList should use absolute positioning for items"),
                    Absent("TODO", message="VirtualList still contains TODO comments - needs implementation"),
                ),
            ),
        ],
        title="Virtual Scrolling",
    )
