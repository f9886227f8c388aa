# Licensed under the GPLv3 - see LICENSE
version = '0.1.0'
