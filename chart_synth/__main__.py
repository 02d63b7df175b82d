"""chart-synth is a command line program that calls the chart-synth library.

Example usage:
  python -m chart_synth synth --output-dir dist
  python -m chart_synth get --output-dir dist
"""

from chart_synth.tool.chart_synth import main

if __name__ == "__main__":
    main()
