"""
Test suite for the pure pursuit path following simulator.

This package contains unit tests organized by component:
- test_path.py: Tests for simplification, segment building and path helpers
- test_follower.py: Tests for the pure pursuit controller
- test_model.py: Tests for unicycle integration
- test_simulation.py: Tests for the simulation loop and run sessions
- test_instructions.py: Tests for turn/drive instructions
- test_data_collector.py: Tests for CSV run logging
- test_visualization.py: Tests for plotting and the command-line tools
"""
