"""Pure domain services: trend fitting, growth projection and risk scoring."""
