"""Pure geometry helpers. Import the submodules directly."""
