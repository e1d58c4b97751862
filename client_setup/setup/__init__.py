"""Client contract setup: patching, staging, toolchain and the interactive flow."""
