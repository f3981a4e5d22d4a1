#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

import logging
import sys

# Libraries that log connection chatter at INFO; silenced unless verbose output is requested.
CHATTY_LIBRARIES = ('kazoo', 'urllib3')


class PlainFormatter(logging.Formatter):
  """
    Format a log in a simple style:
    log(level): msg
  """
  SCHEME = "plain"

  LEVEL_MAP = {
    logging.FATAL: "FATAL",
    logging.ERROR: "ERROR",
    logging.WARN:  "WARN",
    logging.INFO:  "info",
    logging.DEBUG: "debug"
  }

  def format(self, record):
    level = PlainFormatter.LEVEL_MAP.get(record.levelno, "?????")
    message = "log(%s): %s" % (level, record.getMessage())
    if record.exc_info:
      message = "%s\n%s" % (message, self.formatException(record.exc_info))
    return message


def setup_default_log_handlers(level, stream=None):
  """Send log records at or above level to stderr, and quiet down third party libraries."""
  handler = logging.StreamHandler(stream or sys.stderr)
  handler.setLevel(level)
  handler.setFormatter(PlainFormatter())
  root_logger = logging.getLogger()
  root_logger.addHandler(handler)
  root_logger.setLevel(level)
  lib_level = logging.DEBUG if level <= logging.DEBUG else logging.CRITICAL
  for name in CHATTY_LIBRARIES:
    logging.getLogger(name).setLevel(lib_level)
  return handler
