from enum import Enum


class View(str, Enum):
    DASHBOARD = "dashboard"
    ALL_ASSETS = "all-assets"
    ACCESSORIES = "accessories"
    EMPLOYEES = "employees"
    SETTINGS = "settings"


VIEW_LABELS = {
    View.DASHBOARD: "📊 Dashboard",
    View.ALL_ASSETS: "💻 Main Assets",
    View.ACCESSORIES: "🖱️ Accessories",
    View.EMPLOYEES: "👥 Employees",
    View.SETTINGS: "⚙️ Settings",
}


class Navigation:
    """Holds the current view. ``dispatch`` is the only way to change it."""

    def __init__(self, start=View.DASHBOARD):
        self.current = View(start)

    def dispatch(self, target):
        try:
            view = View(target)
        except ValueError:
            raise ValueError(f"Unknown view: {target!r}") from None
        self.current = view
        return view

    def label(self, view=None):
        return VIEW_LABELS[view or self.current]
