"""Customer domain - phone-keyed customer directory"""
