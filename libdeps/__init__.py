"""libdeps - export library link dependencies as a legacy CMake script."""
