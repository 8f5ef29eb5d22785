"""SchoolHub school management API."""
